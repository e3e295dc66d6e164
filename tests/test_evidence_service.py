"""Tests for evidence submission."""

import asyncio
from io import BytesIO

import pytest
from PIL import Image

from vidproof.domain.tasks import TaskStatus
from vidproof.domain.videos import VideoDraft, VideoType
from vidproof.services.evidence import EvidenceService, EvidenceSubmissionError
from tests.conftest import (
    FakeTelegramFileClient,
    InMemoryObjectStorage,
    InMemoryProfileRepository,
    InMemoryTaskRepository,
    InMemoryVideoRepository,
)


@pytest.fixture
def service(
    task_repository: InMemoryTaskRepository,
    telegram_file_client: FakeTelegramFileClient,
    evidence_storage: InMemoryObjectStorage,
) -> EvidenceService:
    return EvidenceService(
        task_repository=task_repository,
        file_client=telegram_file_client,
        storage=evidence_storage,
    )


def _pending_task(
    profiles: InMemoryProfileRepository,
    videos: InMemoryVideoRepository,
    tasks: InMemoryTaskRepository,
):  # type: ignore[no-untyped-def]
    profile = profiles.add(40, "Ana")
    video = videos.create_video(
        VideoDraft(title="Video", url="https://v", video_type=VideoType.LINK)
    )
    tasks.add(profile, video)
    return profile, tasks.get_oldest_pending(profile.id)


def test_submit_compresses_and_completes_task(  # noqa: PLR0913
    service: EvidenceService,
    profile_repository: InMemoryProfileRepository,
    video_repository: InMemoryVideoRepository,
    task_repository: InMemoryTaskRepository,
    telegram_file_client: FakeTelegramFileClient,
    evidence_storage: InMemoryObjectStorage,
) -> None:
    buffer = BytesIO()
    Image.new("RGB", (2400, 1800), color=(10, 120, 200)).save(buffer, format="PNG")
    telegram_file_client.content = buffer.getvalue()
    profile, task = _pending_task(profile_repository, video_repository, task_repository)

    receipt = asyncio.run(service.submit(profile, task, "photo-id"))

    [(key, stored)] = evidence_storage.objects.items()
    with Image.open(BytesIO(stored)) as image:
        assert image.format == "JPEG"
        assert image.size == (1200, 900)
    assert receipt.evidence_url.endswith(key)
    assert receipt.remaining_pending == 0
    assert task_repository.tasks[task.id].status is TaskStatus.DONE


def test_submit_download_failure(
    service: EvidenceService,
    profile_repository: InMemoryProfileRepository,
    video_repository: InMemoryVideoRepository,
    task_repository: InMemoryTaskRepository,
    telegram_file_client: FakeTelegramFileClient,
) -> None:
    telegram_file_client.fail = True
    profile, task = _pending_task(profile_repository, video_repository, task_repository)

    with pytest.raises(EvidenceSubmissionError) as excinfo:
        asyncio.run(service.submit(profile, task, "photo-id"))

    assert excinfo.value.user_message == "Error al obtener la imagen. Intenta de nuevo."
    assert task_repository.tasks[task.id].status is TaskStatus.PENDING


def test_submit_upload_failure(
    service: EvidenceService,
    profile_repository: InMemoryProfileRepository,
    video_repository: InMemoryVideoRepository,
    task_repository: InMemoryTaskRepository,
    evidence_storage: InMemoryObjectStorage,
) -> None:
    evidence_storage.fail_upload = True
    profile, task = _pending_task(profile_repository, video_repository, task_repository)

    with pytest.raises(EvidenceSubmissionError) as excinfo:
        asyncio.run(service.submit(profile, task, "photo-id"))

    assert "Error al guardar la imagen" in excinfo.value.user_message
    assert task_repository.tasks[task.id].status is TaskStatus.PENDING


def test_submit_update_failure_removes_uploaded_object(
    service: EvidenceService,
    profile_repository: InMemoryProfileRepository,
    video_repository: InMemoryVideoRepository,
    task_repository: InMemoryTaskRepository,
    evidence_storage: InMemoryObjectStorage,
) -> None:
    task_repository.fail_complete = True
    profile, task = _pending_task(profile_repository, video_repository, task_repository)

    with pytest.raises(EvidenceSubmissionError) as excinfo:
        asyncio.run(service.submit(profile, task, "photo-id"))

    assert excinfo.value.user_message == (
        "Error al actualizar la tarea. Intenta de nuevo."
    )
    assert evidence_storage.objects == {}
    assert len(evidence_storage.removed) == 1
    assert task_repository.tasks[task.id].status is TaskStatus.PENDING


def test_oldest_pending_skips_completed(
    service: EvidenceService,
    profile_repository: InMemoryProfileRepository,
    video_repository: InMemoryVideoRepository,
    task_repository: InMemoryTaskRepository,
) -> None:
    profile, first = _pending_task(
        profile_repository, video_repository, task_repository
    )
    second_video = video_repository.create_video(
        VideoDraft(title="Segundo", url="https://v2", video_type=VideoType.LINK)
    )
    second = task_repository.add(profile, second_video)

    asyncio.run(service.submit(profile, first, "photo-id"))

    assert service.oldest_pending(profile).id == second.id


def test_submit_returns_receipt_when_pending_count_fails(
    service: EvidenceService,
    profile_repository: InMemoryProfileRepository,
    video_repository: InMemoryVideoRepository,
    task_repository: InMemoryTaskRepository,
) -> None:
    def count_pending(_profile_id: object) -> int:
        raise RuntimeError("store down")

    task_repository.count_pending = count_pending
    profile, task = _pending_task(profile_repository, video_repository, task_repository)

    receipt = asyncio.run(service.submit(profile, task, "photo-id"))

    assert receipt.remaining_pending is None
    assert task_repository.tasks[task.id].status is TaskStatus.DONE
