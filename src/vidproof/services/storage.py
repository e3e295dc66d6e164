"""Object storage interface for evidence and video files."""

from typing import Protocol


class ObjectStorage(Protocol):
    """Bucket-scoped blob storage."""

    def upload(
        self, key: str, content: bytes, content_type: str, upsert: bool = True
    ) -> str:
        """Upload bytes under ``key`` and return their public URL."""

    def remove(self, keys: list[str]) -> None:
        """Delete the given keys."""
