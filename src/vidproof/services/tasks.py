"""Task assignment, completion and reporting."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID

from vidproof.domain.tasks import (
    DashboardStats,
    PendingGroup,
    PendingReport,
    TaskMonitorRow,
    TaskRecord,
    TaskStatus,
)

ALL_FILTER = "todos"

logger = logging.getLogger(__name__)


class TaskRepository(Protocol):
    """Persistence interface for tasks and their reporting views."""

    def create_tasks(self, pairs: list[tuple[UUID, UUID]]) -> int:
        """Create pending tasks for (profile_id, video_id) pairs, skipping existing."""

    def get_task(self, task_id: UUID) -> TaskRecord | None:
        """Return a task by id, if present."""

    def get_oldest_pending(self, profile_id: UUID) -> TaskRecord | None:
        """Return the profile's oldest pending task with its video title."""

    def complete_task(
        self, task_id: UUID, evidence_url: str, delivered_at: datetime
    ) -> None:
        """Mark a task as done with its evidence."""

    def reset_task(self, task_id: UUID) -> None:
        """Move a task back to pending and clear its evidence."""

    def count_pending(self, profile_id: UUID) -> int:
        """Return the number of pending tasks for a profile."""

    def list_recent_for_profile(self, profile_id: UUID, limit: int) -> list[TaskRecord]:
        """Return a profile's newest tasks with video titles."""

    def list_monitor(
        self,
        status: TaskStatus | None = None,
        video_id: UUID | None = None,
        profile_id: UUID | None = None,
    ) -> list[TaskMonitorRow]:
        """Return monitor rows, newest assignment first."""

    def get_stats(self) -> DashboardStats | None:
        """Return dashboard counters, if the view is available."""


Notifier = Callable[[int], Awaitable[object]]


@dataclass
class TaskService:
    """Service for task state transitions and read models."""

    repository: TaskRepository
    rejection_notifier: Notifier | None = None

    def get_stats(self) -> DashboardStats:
        """Return dashboard counters, zeros when the view is unavailable."""
        try:
            stats = self.repository.get_stats()
        except Exception:
            logger.exception("Failed to load dashboard stats")
            return DashboardStats()
        return stats or DashboardStats()

    def list_monitor(
        self,
        status: str | None = None,
        video_id: str | None = None,
        profile_id: str | None = None,
    ) -> list[TaskMonitorRow]:
        """Return monitor rows filtered by optional status, video and profile."""
        return self.repository.list_monitor(
            status=TaskStatus(status) if _is_set(status) else None,
            video_id=UUID(video_id) if _is_set(video_id) else None,
            profile_id=UUID(profile_id) if _is_set(profile_id) else None,
        )

    def pending_rows(self) -> list[TaskMonitorRow]:
        """Return every pending monitor row."""
        return self.repository.list_monitor(status=TaskStatus.PENDING)

    def pending_report(self) -> PendingReport:
        """Group every pending task by participant."""
        rows = self.pending_rows()
        groups: dict[str, PendingGroup] = {}
        for row in rows:
            group = groups.setdefault(
                row.full_name,
                PendingGroup(full_name=row.full_name, telegram_id=row.telegram_id),
            )
            group.video_titles.append(row.video_title)
        return PendingReport(total_pending=len(rows), groups=list(groups.values()))

    def recent_for_profile(self, profile_id: UUID, limit: int = 10) -> list[TaskRecord]:
        """Return a participant's newest tasks."""
        return self.repository.list_recent_for_profile(profile_id, limit)

    async def reject(self, task_id: UUID) -> TaskRecord:
        """Reset a task to pending, then notify its participant (best effort)."""
        task = self.repository.get_task(task_id)
        if task is None:
            raise LookupError(f"Task {task_id} not found")
        self.repository.reset_task(task_id)
        if self.rejection_notifier is not None and task.telegram_id is not None:
            try:
                await self.rejection_notifier(task.telegram_id)
            except Exception:
                logger.exception(
                    "Failed to notify rejected evidence",
                    extra={"task_id": str(task_id)},
                )
        return task


def _is_set(value: str | None) -> bool:
    return bool(value) and value != ALL_FILTER
