"""Per-participant conversational session storage."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol

from vidproof.domain.sessions import UploadSession


class SessionStore(Protocol):
    """Keyed store for upload sessions, one entry per participant."""

    def get(self, participant_id: int) -> UploadSession | None:
        """Return the live session for a participant, if any."""

    def set(self, participant_id: int, session: UploadSession) -> None:
        """Create or overwrite the participant's session."""

    def delete(self, participant_id: int) -> None:
        """Drop the participant's session, if present."""


@dataclass
class _SessionEntry:
    session: UploadSession
    expires_at: datetime


@dataclass
class InMemorySessionStore(SessionStore):
    """Process-local session map with per-entry expiry.

    Entries do not survive a restart. Use ``SupabaseSessionStore`` when
    in-flight uploads must outlive the process.
    """

    ttl_seconds: int = 86400
    _entries: dict[int, _SessionEntry] = field(
        default_factory=dict, init=False, repr=False
    )

    def get(self, participant_id: int) -> UploadSession | None:
        """Return a session if it hasn't expired."""
        entry = self._entries.get(participant_id)
        if entry is None:
            return None
        if datetime.now(tz=UTC) >= entry.expires_at:
            self._entries.pop(participant_id, None)
            return None
        return entry.session

    def set(self, participant_id: int, session: UploadSession) -> None:
        """Store a session with a fresh TTL."""
        expires_at = datetime.now(tz=UTC) + timedelta(seconds=self.ttl_seconds)
        self._entries[participant_id] = _SessionEntry(
            session=session, expires_at=expires_at
        )

    def delete(self, participant_id: int) -> None:
        self._entries.pop(participant_id, None)
