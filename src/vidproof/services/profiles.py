"""Participant profile business logic."""

import logging
from dataclasses import dataclass
from typing import Protocol

from vidproof.domain.models import ProfileRecord
from vidproof.services.tasks import TaskRepository
from vidproof.services.videos import VideoRepository

MIN_NAME_LENGTH = 3

logger = logging.getLogger(__name__)


class ProfileRepository(Protocol):
    """Persistence interface for participant profiles."""

    def get_by_telegram_id(self, telegram_id: int) -> ProfileRecord | None:
        """Return the profile for a Telegram user id, if present."""

    def create_profile(self, telegram_id: int, full_name: str) -> ProfileRecord:
        """Create and return an active profile."""

    def list_active(self) -> list[ProfileRecord]:
        """Return all active profiles ordered by name."""


class InvalidNameError(ValueError):
    """Raised when a display name fails validation."""


@dataclass
class ProfileService:
    """Application service for participant registration."""

    repository: ProfileRepository
    video_repository: VideoRepository
    task_repository: TaskRepository

    def get_by_telegram_id(self, telegram_id: int) -> ProfileRecord | None:
        """Return the profile registered for a Telegram id."""
        return self.repository.get_by_telegram_id(telegram_id)

    def list_active(self) -> list[ProfileRecord]:
        """Return active profiles."""
        return self.repository.list_active()

    def register(self, telegram_id: int, full_name: str) -> ProfileRecord:
        """Create a profile and assign it every currently active video."""
        name = full_name.strip()
        if len(name) < MIN_NAME_LENGTH:
            raise InvalidNameError(
                f"Name must have at least {MIN_NAME_LENGTH} characters"
            )
        profile = self.repository.create_profile(telegram_id, name)
        videos = self.video_repository.list_active()
        created = self.task_repository.create_tasks(
            [(profile.id, video.id) for video in videos]
        )
        logger.info(
            "Registered profile",
            extra={"profile_id": str(profile.id), "tasks_created": created},
        )
        return profile
