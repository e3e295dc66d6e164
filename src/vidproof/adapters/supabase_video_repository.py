"""Supabase-backed video repository."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from vidproof.domain.videos import EXPIRED_VIDEO_URL, VideoDraft, VideoRecord, VideoType
from vidproof.services.videos import VideoRepository

_COLUMNS = (
    "id, titulo, url_video, descripcion, activo, tipo_video, archivo_id, "
    "fecha_expiracion"
)


@dataclass
class SupabaseVideoRepository(VideoRepository):
    """Supabase implementation for videos."""

    client: Client

    def create_video(self, draft: VideoDraft) -> VideoRecord:
        """Create a video row and return it."""
        response = (
            self.client.table("videos")
            .insert(
                {
                    "titulo": draft.title,
                    "url_video": draft.url,
                    "descripcion": draft.description,
                    "activo": True,
                    "tipo_video": draft.video_type.value,
                    "archivo_id": draft.storage_key,
                    "fecha_expiracion": draft.expires_at.isoformat()
                    if draft.expires_at
                    else None,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create video in Supabase")
        return _parse_row(response.data[0])

    def get_video(self, video_id: UUID) -> VideoRecord | None:
        """Return a video by id, if present."""
        response = (
            self.client.table("videos")
            .select(_COLUMNS)
            .eq("id", str(video_id))
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_row(response.data[0])
        return None

    def list_videos(self) -> list[VideoRecord]:
        """Return all videos, newest first."""
        response = (
            self.client.table("videos")
            .select(_COLUMNS)
            .order("creado_at", desc=True)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def list_active(self) -> list[VideoRecord]:
        """Return active videos."""
        response = (
            self.client.table("videos").select(_COLUMNS).eq("activo", True).execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def list_expired(self, now: datetime) -> list[VideoRecord]:
        """Return active videos whose expiration has passed."""
        response = (
            self.client.table("videos")
            .select(_COLUMNS)
            .eq("activo", True)
            .lt("fecha_expiracion", now.isoformat())
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def set_active(self, video_id: UUID, active: bool) -> None:
        """Update the active flag."""
        self.client.table("videos").update({"activo": active}).eq(
            "id", str(video_id)
        ).execute()

    def mark_expired(self, video_id: UUID) -> None:
        """Deactivate the video and drop its file reference."""
        self.client.table("videos").update(
            {"archivo_id": None, "url_video": EXPIRED_VIDEO_URL, "activo": False}
        ).eq("id", str(video_id)).execute()

    def delete_video(self, video_id: UUID) -> None:
        """Delete a video row."""
        self.client.table("videos").delete().eq("id", str(video_id)).execute()


def _parse_row(row: dict[str, object]) -> VideoRecord:
    expires_raw = row.get("fecha_expiracion")
    return VideoRecord(
        id=UUID(str(row["id"])),
        title=str(row.get("titulo") or ""),
        url=str(row.get("url_video") or ""),
        video_type=VideoType(row.get("tipo_video") or VideoType.LINK.value),
        active=bool(row.get("activo", False)),
        description=row.get("descripcion"),
        storage_key=row.get("archivo_id"),
        expires_at=datetime.fromisoformat(expires_raw)
        if isinstance(expires_raw, str) and expires_raw
        else None,
    )
