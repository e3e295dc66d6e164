"""Telegram bot command configuration."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class TelegramCommand:
    """Declarative bot command definition."""

    command: str
    description: str


class BotCommand(Enum):
    """Enum of bot commands (single source of truth)."""

    START = TelegramCommand("start", "Registro y bienvenida")
    VIDEO = TelegramCommand("video", "Subir un video para todos los participantes")
    REPORT = TelegramCommand("reporte", "Reporte de tareas pendientes")
    MY_EVIDENCE = TelegramCommand("mievidencia", "Tus tareas y evidencias")
    CANCEL = TelegramCommand("cancelar", "Cancelar la operación en curso")

    @property
    def text(self) -> str:
        """Return the slash-prefixed command text."""
        return f"/{self.value.command}"


MY_EVIDENCE_ALIAS = "/mi_evidencia"


def telegram_commands() -> list[dict[str, str]]:
    """Return commands formatted for Telegram API."""
    return [
        {"command": entry.value.command, "description": entry.value.description}
        for entry in BotCommand
    ]


def parse_command(text: str | None) -> str | None:
    """Return the normalized slash command at the start of a message, if any."""
    if not text:
        return None
    first = text.strip().split(maxsplit=1)
    if not first or not first[0].startswith("/"):
        return None
    command, _, _bot_name = first[0].partition("@")
    return command.lower()


CHAT_MENU_BUTTON: dict[str, object] = {"type": "commands"}
