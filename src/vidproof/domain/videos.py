"""Domain models for published videos."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

TELEGRAM_REF_PREFIX = "telegram:"
EXPIRED_VIDEO_URL = "Video expirado - archivo eliminado"


class VideoType(str, Enum):
    """How a video is hosted."""

    LINK = "link"
    FILE = "file"
    TELEGRAM = "telegram"


@dataclass(frozen=True)
class VideoDraft:
    """Values for a video that is about to be created."""

    title: str
    url: str
    video_type: VideoType
    description: str | None = None
    storage_key: str | None = None
    expires_at: datetime | None = None


@dataclass(frozen=True)
class VideoRecord:
    """Represents a video row."""

    id: UUID
    title: str
    url: str
    video_type: VideoType
    active: bool
    description: str | None = None
    storage_key: str | None = None
    expires_at: datetime | None = None

    @property
    def telegram_file_id(self) -> str | None:
        """Return the Telegram file id for transport-hosted videos."""
        if self.url.startswith(TELEGRAM_REF_PREFIX):
            return self.url.removeprefix(TELEGRAM_REF_PREFIX)
        return None


def telegram_video_url(file_id: str) -> str:
    """Encode a Telegram file id as a stored video reference."""
    return f"{TELEGRAM_REF_PREFIX}{file_id}"
