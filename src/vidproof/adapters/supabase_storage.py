"""Supabase Storage bucket adapter."""

from dataclasses import dataclass

from supabase import Client

from vidproof.services.storage import ObjectStorage


@dataclass
class SupabaseObjectStorage(ObjectStorage):
    """Uploads and removes objects in a single Supabase Storage bucket."""

    client: Client
    bucket: str

    def upload(
        self, key: str, content: bytes, content_type: str, upsert: bool = True
    ) -> str:
        """Upload bytes and return the object's public URL."""
        bucket = self.client.storage.from_(self.bucket)
        bucket.upload(
            path=key,
            file=content,
            file_options={
                "content-type": content_type,
                "upsert": "true" if upsert else "false",
            },
        )
        return bucket.get_public_url(key)

    def remove(self, keys: list[str]) -> None:
        """Delete objects by key."""
        if keys:
            self.client.storage.from_(self.bucket).remove(keys)
