"""Domain models for outbound broadcasts."""

from dataclasses import dataclass, field


@dataclass
class BroadcastResult:
    """Per-recipient outcome of a broadcast."""

    delivered: list[int] = field(default_factory=list)
    failed: list[tuple[int, str]] = field(default_factory=list)

    @property
    def delivered_count(self) -> int:
        return len(self.delivered)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    def as_dict(self) -> dict[str, object]:
        """Serialize for JSON responses."""
        return {
            "delivered": self.delivered_count,
            "failed": self.failed_count,
            "failures": [
                {"telegram_id": chat_id, "error": reason}
                for chat_id, reason in self.failed
            ],
        }
