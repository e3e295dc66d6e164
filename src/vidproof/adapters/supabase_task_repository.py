"""Supabase-backed task repository and reporting views."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from vidproof.domain.tasks import (
    DashboardStats,
    TaskMonitorRow,
    TaskRecord,
    TaskStatus,
)
from vidproof.services.tasks import TaskRepository

_TASK_COLUMNS = (
    "id, perfil_id, video_id, estado, url_evidencia, fecha_entrega, created_at"
)


@dataclass
class SupabaseTaskRepository(TaskRepository):
    """Supabase implementation for tasks."""

    client: Client

    def create_tasks(self, pairs: list[tuple[UUID, UUID]]) -> int:
        """Insert pending tasks, ignoring pairs that already have one."""
        if not pairs:
            return 0
        payload = [
            {
                "perfil_id": str(profile_id),
                "video_id": str(video_id),
                "estado": TaskStatus.PENDING.value,
            }
            for profile_id, video_id in pairs
        ]
        response = (
            self.client.table("tareas")
            .upsert(payload, on_conflict="video_id,perfil_id", ignore_duplicates=True)
            .execute()
        )
        return len(response.data or [])

    def get_task(self, task_id: UUID) -> TaskRecord | None:
        """Return a task with its participant's Telegram id."""
        response = (
            self.client.table("tareas")
            .select(f"{_TASK_COLUMNS}, perfiles(telegram_id), videos(titulo)")
            .eq("id", str(task_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_task(response.data[0])

    def get_oldest_pending(self, profile_id: UUID) -> TaskRecord | None:
        """Return the earliest-created pending task for a profile."""
        response = (
            self.client.table("tareas")
            .select(f"{_TASK_COLUMNS}, videos(titulo)")
            .eq("perfil_id", str(profile_id))
            .eq("estado", TaskStatus.PENDING.value)
            .order("created_at", desc=False)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_task(response.data[0])

    def complete_task(
        self, task_id: UUID, evidence_url: str, delivered_at: datetime
    ) -> None:
        """Mark the task done with its evidence."""
        self.client.table("tareas").update(
            {
                "estado": TaskStatus.DONE.value,
                "url_evidencia": evidence_url,
                "fecha_entrega": delivered_at.isoformat(),
            }
        ).eq("id", str(task_id)).execute()

    def reset_task(self, task_id: UUID) -> None:
        """Move the task back to pending and clear evidence fields."""
        self.client.table("tareas").update(
            {
                "estado": TaskStatus.PENDING.value,
                "url_evidencia": None,
                "fecha_entrega": None,
            }
        ).eq("id", str(task_id)).execute()

    def count_pending(self, profile_id: UUID) -> int:
        """Return the number of pending tasks for a profile."""
        response = (
            self.client.table("tareas")
            .select("id", count="exact")
            .eq("perfil_id", str(profile_id))
            .eq("estado", TaskStatus.PENDING.value)
            .execute()
        )
        if response.count is not None:
            return response.count
        return len(response.data or [])

    def list_recent_for_profile(self, profile_id: UUID, limit: int) -> list[TaskRecord]:
        """Return a profile's newest tasks."""
        response = (
            self.client.table("tareas")
            .select(f"{_TASK_COLUMNS}, videos(titulo)")
            .eq("perfil_id", str(profile_id))
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_task(row) for row in response.data or []]

    def list_monitor(
        self,
        status: TaskStatus | None = None,
        video_id: UUID | None = None,
        profile_id: UUID | None = None,
    ) -> list[TaskMonitorRow]:
        """Return rows of the monitor view, newest assignment first."""
        query = self.client.table("vista_monitor_tareas").select("*")
        if status is not None:
            query = query.eq("estado", status.value)
        if video_id is not None:
            query = query.eq("video_id", str(video_id))
        if profile_id is not None:
            query = query.eq("perfil_id", str(profile_id))
        response = query.order("fecha_asignacion", desc=True).execute()
        return [_parse_monitor_row(row) for row in response.data or []]

    def get_stats(self) -> DashboardStats | None:
        """Return the dashboard aggregate row."""
        response = (
            self.client.table("vista_estadisticas").select("*").limit(1).execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return DashboardStats(
            active_profiles=int(row.get("usuarios_activos") or 0),
            active_videos=int(row.get("videos_activos") or 0),
            pending_tasks=int(row.get("tareas_pendientes") or 0),
            completed_tasks=int(row.get("tareas_completadas") or 0),
            completion_rate=float(row.get("porcentaje_cumplimiento") or 0.0),
        )


def _parse_timestamp(value: object) -> datetime | None:
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None


def _embedded(row: dict[str, object], relation: str) -> dict[str, object]:
    value = row.get(relation)
    return value if isinstance(value, dict) else {}


def _parse_task(row: dict[str, object]) -> TaskRecord:
    telegram_id = _embedded(row, "perfiles").get("telegram_id")
    return TaskRecord(
        id=UUID(str(row["id"])),
        profile_id=UUID(str(row["perfil_id"])),
        video_id=UUID(str(row["video_id"])),
        status=TaskStatus(row.get("estado") or TaskStatus.PENDING.value),
        evidence_url=row.get("url_evidencia"),
        delivered_at=_parse_timestamp(row.get("fecha_entrega")),
        created_at=_parse_timestamp(row.get("created_at")),
        video_title=_embedded(row, "videos").get("titulo"),
        telegram_id=int(telegram_id) if telegram_id is not None else None,
    )


def _parse_monitor_row(row: dict[str, object]) -> TaskMonitorRow:
    return TaskMonitorRow(
        task_id=UUID(str(row["tarea_id"])),
        status=TaskStatus(row["estado"]),
        evidence_url=row.get("url_evidencia"),
        delivered_at=_parse_timestamp(row.get("fecha_entrega")),
        assigned_at=_parse_timestamp(row.get("fecha_asignacion")),
        video_id=UUID(str(row["video_id"])),
        video_title=str(row.get("video_titulo") or ""),
        video_url=str(row.get("url_video") or ""),
        profile_id=UUID(str(row["perfil_id"])),
        telegram_id=int(row["telegram_id"]),
        full_name=str(row.get("nombre_completo") or ""),
    )
