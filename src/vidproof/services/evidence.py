"""Evidence submission: screenshot in, completed task out."""

import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime

from vidproof.adapters.telegram_file_client import TelegramFileClient
from vidproof.domain.models import ProfileRecord
from vidproof.domain.tasks import TaskRecord
from vidproof.services.images import compress_image
from vidproof.services.storage import ObjectStorage
from vidproof.services.tasks import TaskRepository

logger = logging.getLogger(__name__)


class EvidenceSubmissionError(RuntimeError):
    """Raised when a submission step fails; carries the user-facing message."""

    def __init__(self, user_message: str) -> None:
        super().__init__(user_message)
        self.user_message = user_message


@dataclass(frozen=True)
class EvidenceReceipt:
    """Result of a successful submission."""

    task: TaskRecord
    evidence_url: str
    remaining_pending: int | None


@dataclass
class EvidenceService:
    """Stores a participant's screenshot against their oldest pending task."""

    task_repository: TaskRepository
    file_client: TelegramFileClient
    storage: ObjectStorage

    def oldest_pending(self, profile: ProfileRecord) -> TaskRecord | None:
        """Return the task the next evidence will be attached to."""
        return self.task_repository.get_oldest_pending(profile.id)

    async def submit(
        self, profile: ProfileRecord, task: TaskRecord, file_id: str
    ) -> EvidenceReceipt:
        """Download, compress and store a photo, then complete the task.

        The task update runs last. If it fails, the uploaded object is removed
        and the task stays pending.
        """
        try:
            image_bytes = await self.file_client.download_file_bytes(file_id)
        except Exception as exc:
            logger.exception(
                "Failed to download evidence photo", extra={"file_id": file_id}
            )
            raise EvidenceSubmissionError(
                "Error al obtener la imagen. Intenta de nuevo."
            ) from exc

        compressed = compress_image(image_bytes)
        key = f"{profile.telegram_id}/{task.id}_{int(time.time() * 1000)}.jpg"
        try:
            evidence_url = self.storage.upload(key, compressed, "image/jpeg")
        except Exception as exc:
            logger.exception("Failed to upload evidence", extra={"key": key})
            raise EvidenceSubmissionError(
                "Error al guardar la imagen. Por favor, intenta de nuevo."
            ) from exc

        try:
            self.task_repository.complete_task(
                task.id, evidence_url, datetime.now(tz=UTC)
            )
        except Exception as exc:
            logger.exception(
                "Failed to complete task", extra={"task_id": str(task.id)}
            )
            self._discard_upload(key)
            raise EvidenceSubmissionError(
                "Error al actualizar la tarea. Intenta de nuevo."
            ) from exc

        try:
            remaining = self.task_repository.count_pending(profile.id)
        except Exception:
            logger.exception(
                "Failed to count pending tasks", extra={"profile_id": str(profile.id)}
            )
            remaining = None
        return EvidenceReceipt(
            task=task, evidence_url=evidence_url, remaining_pending=remaining
        )

    def _discard_upload(self, key: str) -> None:
        try:
            self.storage.remove([key])
        except Exception:
            logger.exception("Failed to remove orphaned evidence", extra={"key": key})
