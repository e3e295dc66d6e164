"""Telegram API client adapter."""

from dataclasses import dataclass
from typing import Protocol

import httpx

_API_BASE = "https://api.telegram.org"


class TelegramClient(Protocol):
    """Interface for Telegram API interactions."""

    async def send_message(
        self, chat_id: int, text: str, parse_mode: str | None = "Markdown"
    ) -> None:
        """Send a text message to a Telegram chat."""

    async def send_video(
        self,
        chat_id: int,
        video: str,
        caption: str | None = None,
        parse_mode: str | None = "Markdown",
    ) -> None:
        """Send a video (file id or URL) to a Telegram chat."""

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        """Set the bot command list."""

    async def set_chat_menu_button(
        self, menu_button: dict[str, object] | None = None
    ) -> None:
        """Set the chat menu button."""

    async def set_webhook(
        self, url: str, allowed_updates: list[str] | None = None
    ) -> None:
        """Point the bot webhook at the given URL."""

    async def get_webhook_info(self) -> dict[str, object]:
        """Return the current webhook configuration."""

    async def get_me(self) -> dict[str, object]:
        """Return basic information about the bot account."""


class TelegramApiError(RuntimeError):
    """Raised when the Bot API answers with ok=false."""


@dataclass
class HttpxTelegramClient:
    """Telegram client implemented with httpx."""

    bot_token: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, bot_token: str) -> "HttpxTelegramClient":
        """Create a Telegram client with a managed httpx session."""
        return cls(bot_token=bot_token, http_client=httpx.AsyncClient())

    def _url(self, method: str) -> str:
        return f"{_API_BASE}/bot{self.bot_token}/{method}"

    async def _call(
        self, method: str, payload: dict[str, object], timeout: float = 10
    ) -> object:
        response = await self.http_client.post(
            self._url(method), json=payload, timeout=timeout
        )
        response.raise_for_status()
        data = response.json()
        if not data.get("ok"):
            raise TelegramApiError(data.get("description") or f"{method} failed")
        return data.get("result")

    async def send_message(
        self, chat_id: int, text: str, parse_mode: str | None = "Markdown"
    ) -> None:
        """Send a message using Telegram's sendMessage API."""
        payload: dict[str, object] = {"chat_id": chat_id, "text": text}
        if parse_mode is not None:
            payload["parse_mode"] = parse_mode
        await self._call("sendMessage", payload)

    async def send_video(
        self,
        chat_id: int,
        video: str,
        caption: str | None = None,
        parse_mode: str | None = "Markdown",
    ) -> None:
        """Send a video by file id or URL using sendVideo."""
        payload: dict[str, object] = {
            "chat_id": chat_id,
            "video": video,
            "supports_streaming": True,
        }
        if caption is not None:
            payload["caption"] = caption
            if parse_mode is not None:
                payload["parse_mode"] = parse_mode
        await self._call("sendVideo", payload, timeout=60)

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        """Set the bot command list."""
        await self._call("setMyCommands", {"commands": commands})

    async def set_chat_menu_button(
        self, menu_button: dict[str, object] | None = None
    ) -> None:
        """Set the chat menu button."""
        await self._call(
            "setChatMenuButton", {"menu_button": menu_button or {"type": "commands"}}
        )

    async def set_webhook(
        self, url: str, allowed_updates: list[str] | None = None
    ) -> None:
        """Point the bot webhook at the given URL."""
        await self._call(
            "setWebhook",
            {"url": url, "allowed_updates": allowed_updates or ["message"]},
        )

    async def get_webhook_info(self) -> dict[str, object]:
        """Return the current webhook configuration."""
        response = await self.http_client.get(
            self._url("getWebhookInfo"), timeout=10
        )
        response.raise_for_status()
        return response.json()

    async def get_me(self) -> dict[str, object]:
        """Return basic information about the bot account."""
        response = await self.http_client.get(self._url("getMe"), timeout=10)
        response.raise_for_status()
        data = response.json()
        if not data.get("ok"):
            raise TelegramApiError(data.get("description") or "getMe failed")
        return data["result"]

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()
