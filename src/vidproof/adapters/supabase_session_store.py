"""Supabase-backed session store for upload conversations."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from supabase import Client

from vidproof.domain.sessions import SessionStep, UploadSession
from vidproof.services.sessions import SessionStore


@dataclass
class SupabaseSessionStore(SessionStore):
    """Durable keyed session store; one row per participant."""

    client: Client
    ttl_seconds: int = 86400

    def get(self, participant_id: int) -> UploadSession | None:
        """Return the participant's session unless it has expired."""
        response = (
            self.client.table("bot_sessions")
            .select("telegram_id, step, pending_video_ref, expires_at")
            .eq("telegram_id", participant_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        expires_raw = row.get("expires_at")
        if isinstance(expires_raw, str) and expires_raw:
            if datetime.now(tz=UTC) >= datetime.fromisoformat(expires_raw):
                self.delete(participant_id)
                return None
        return UploadSession(
            step=SessionStep(row["step"]),
            pending_video_ref=row.get("pending_video_ref"),
        )

    def set(self, participant_id: int, session: UploadSession) -> None:
        """Create or overwrite the participant's session."""
        expires_at = datetime.now(tz=UTC) + timedelta(seconds=self.ttl_seconds)
        self.client.table("bot_sessions").upsert(
            {
                "telegram_id": participant_id,
                "step": session.step.value,
                "pending_video_ref": session.pending_video_ref,
                "expires_at": expires_at.isoformat(),
            },
            on_conflict="telegram_id",
        ).execute()

    def delete(self, participant_id: int) -> None:
        """Remove the participant's session row."""
        self.client.table("bot_sessions").delete().eq(
            "telegram_id", participant_id
        ).execute()
