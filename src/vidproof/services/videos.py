"""Video publication and lifecycle."""

import logging
import secrets
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from vidproof.domain.models import ProfileRecord
from vidproof.domain.videos import (
    VideoDraft,
    VideoRecord,
    VideoType,
    telegram_video_url,
)
from vidproof.services.storage import ObjectStorage
from vidproof.services.tasks import TaskRepository

if TYPE_CHECKING:
    from vidproof.services.profiles import ProfileRepository

logger = logging.getLogger(__name__)


class VideoRepository(Protocol):
    """Persistence interface for videos."""

    def create_video(self, draft: VideoDraft) -> VideoRecord:
        """Create a video row and return it."""

    def get_video(self, video_id: UUID) -> VideoRecord | None:
        """Return a video by id, if present."""

    def list_videos(self) -> list[VideoRecord]:
        """Return all videos, newest first."""

    def list_active(self) -> list[VideoRecord]:
        """Return active videos."""

    def list_expired(self, now: datetime) -> list[VideoRecord]:
        """Return active videos whose expiration is before ``now``."""

    def set_active(self, video_id: UUID, active: bool) -> None:
        """Toggle the active flag."""

    def mark_expired(self, video_id: UUID) -> None:
        """Deactivate a video and drop its hosted file reference."""

    def delete_video(self, video_id: UUID) -> None:
        """Delete a video row."""


@dataclass(frozen=True)
class VideoPublication:
    """A newly created video and the profiles it was assigned to."""

    video: VideoRecord
    recipients: list[ProfileRecord]
    tasks_created: int


@dataclass
class CleanupSummary:
    """Outcome of an expired-video cleanup run."""

    total: int = 0
    removed: int = 0
    errors: int = 0
    removed_titles: list[str] = field(default_factory=list)


@dataclass
class VideoService:
    """Service for creating videos and fanning out their tasks."""

    repository: VideoRepository
    profile_repository: "ProfileRepository"
    task_repository: TaskRepository
    storage: ObjectStorage
    ttl_days: int = 7

    def list_videos(self) -> list[VideoRecord]:
        """Return all videos."""
        return self.repository.list_videos()

    def get_video(self, video_id: UUID) -> VideoRecord | None:
        """Return a video by id."""
        return self.repository.get_video(video_id)

    def create_link_video(
        self, title: str, url: str, description: str | None = None
    ) -> VideoPublication:
        """Publish an externally hosted video."""
        if not title.strip():
            raise ValueError("Title is required")
        if not url.strip():
            raise ValueError("Video URL is required")
        draft = VideoDraft(
            title=title.strip(),
            url=url.strip(),
            video_type=VideoType.LINK,
            description=description,
        )
        return self._publish(draft)

    def create_file_video(  # noqa: PLR0913
        self,
        title: str,
        filename: str,
        content: bytes,
        content_type: str | None,
        description: str | None = None,
    ) -> VideoPublication:
        """Upload a video file to storage and publish it."""
        if not title.strip():
            raise ValueError("Title is required")
        if not content:
            raise ValueError("Video file is empty")
        storage_key = _video_storage_key(filename)
        public_url = self.storage.upload(
            storage_key, content, content_type or "video/mp4", upsert=False
        )
        draft = VideoDraft(
            title=title.strip(),
            url=public_url,
            video_type=VideoType.FILE,
            description=description,
            storage_key=storage_key,
            expires_at=self._expiration(),
        )
        return self._publish(draft)

    def create_telegram_video(self, title: str, file_id: str) -> VideoPublication:
        """Publish a video that was uploaded to the bot itself."""
        draft = VideoDraft(
            title=title.strip(),
            url=telegram_video_url(file_id),
            video_type=VideoType.TELEGRAM,
            description="Video subido desde Telegram",
            expires_at=self._expiration(),
        )
        return self._publish(draft)

    def set_active(self, video_id: UUID, active: bool) -> None:
        """Activate or deactivate a video."""
        self.repository.set_active(video_id, active)

    def delete_video(self, video_id: UUID) -> None:
        """Delete a video row."""
        self.repository.delete_video(video_id)

    def cleanup_expired(self, now: datetime | None = None) -> CleanupSummary:
        """Remove hosted files of expired videos and deactivate them."""
        moment = now or datetime.now(tz=UTC)
        expired = self.repository.list_expired(moment)
        summary = CleanupSummary(total=len(expired))
        for video in expired:
            try:
                if video.storage_key:
                    self.storage.remove([video.storage_key])
                self.repository.mark_expired(video.id)
            except Exception:
                logger.exception(
                    "Failed to clean up expired video",
                    extra={"video_id": str(video.id)},
                )
                summary.errors += 1
                continue
            summary.removed += 1
            summary.removed_titles.append(video.title)
        logger.info(
            "Expired video cleanup finished",
            extra={"removed": summary.removed, "errors": summary.errors},
        )
        return summary

    def _publish(self, draft: VideoDraft) -> VideoPublication:
        video = self.repository.create_video(draft)
        recipients = self.profile_repository.list_active()
        created = self.task_repository.create_tasks(
            [(profile.id, video.id) for profile in recipients]
        )
        return VideoPublication(
            video=video, recipients=recipients, tasks_created=created
        )

    def _expiration(self) -> datetime:
        return datetime.now(tz=UTC) + timedelta(days=self.ttl_days)


def _video_storage_key(filename: str) -> str:
    suffix = PurePosixPath(filename).suffix.lower() or ".mp4"
    return f"{int(time.time() * 1000)}_{secrets.token_hex(3)}{suffix}"
