"""Domain models for conversational upload sessions."""

from dataclasses import dataclass
from enum import Enum


class SessionStep(str, Enum):
    """Steps of the video upload conversation."""

    AWAITING_VIDEO = "AWAITING_VIDEO"
    AWAITING_TITLE = "AWAITING_TITLE"


@dataclass(frozen=True)
class UploadSession:
    """Per-participant conversational state."""

    step: SessionStep
    pending_video_ref: str | None = None
