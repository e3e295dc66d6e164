"""Supabase-backed profile repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from vidproof.domain.models import ProfileRecord
from vidproof.services.profiles import ProfileRepository

_COLUMNS = "id, telegram_id, nombre_completo, activo"


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for participant profiles."""

    client: Client

    def get_by_telegram_id(self, telegram_id: int) -> ProfileRecord | None:
        """Return the profile for a Telegram user id, if present."""
        response = (
            self.client.table("perfiles")
            .select(_COLUMNS)
            .eq("telegram_id", telegram_id)
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_row(response.data[0])
        return None

    def create_profile(self, telegram_id: int, full_name: str) -> ProfileRecord:
        """Create an active profile row and return it."""
        response = (
            self.client.table("perfiles")
            .insert(
                {
                    "telegram_id": telegram_id,
                    "nombre_completo": full_name,
                    "activo": True,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create profile in Supabase")
        return _parse_row(response.data[0])

    def list_active(self) -> list[ProfileRecord]:
        """Return active profiles ordered by name."""
        response = (
            self.client.table("perfiles")
            .select(_COLUMNS)
            .eq("activo", True)
            .order("nombre_completo", desc=False)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]


def _parse_row(row: dict[str, object]) -> ProfileRecord:
    return ProfileRecord(
        id=UUID(str(row["id"])),
        telegram_id=int(row["telegram_id"]),
        full_name=str(row.get("nombre_completo") or ""),
        active=bool(row.get("activo", True)),
    )
