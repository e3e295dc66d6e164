"""Domain models for compliance tasks."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID


class TaskStatus(str, Enum):
    """Task lifecycle states as stored in the database."""

    PENDING = "PENDIENTE"
    DONE = "COMPLETADO"


@dataclass(frozen=True)
class TaskRecord:
    """Represents a task linking one profile to one video."""

    id: UUID
    profile_id: UUID
    video_id: UUID
    status: TaskStatus
    evidence_url: str | None = None
    delivered_at: datetime | None = None
    created_at: datetime | None = None
    video_title: str | None = None
    telegram_id: int | None = None


@dataclass(frozen=True)
class TaskMonitorRow:
    """Row of the task monitor view (task joined with video and profile)."""

    task_id: UUID
    status: TaskStatus
    evidence_url: str | None
    delivered_at: datetime | None
    assigned_at: datetime | None
    video_id: UUID
    video_title: str
    video_url: str
    profile_id: UUID
    telegram_id: int
    full_name: str


@dataclass(frozen=True)
class DashboardStats:
    """Aggregate counters for the dashboard."""

    active_profiles: int = 0
    active_videos: int = 0
    pending_tasks: int = 0
    completed_tasks: int = 0
    completion_rate: float = 0.0


@dataclass(frozen=True)
class PendingGroup:
    """Pending video titles for a single participant."""

    full_name: str
    telegram_id: int
    video_titles: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PendingReport:
    """Pending tasks grouped by participant."""

    total_pending: int
    groups: list[PendingGroup]
