"""Domain models for VidProof participants."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class ProfileRecord:
    """Represents a participant profile stored in the database."""

    id: UUID
    telegram_id: int
    full_name: str
    active: bool = True
