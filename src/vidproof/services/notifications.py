"""Outbound Telegram notifications and broadcasts."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass

from vidproof.adapters.telegram_client import TelegramClient
from vidproof.domain.broadcasts import BroadcastResult
from vidproof.domain.models import ProfileRecord
from vidproof.domain.tasks import TaskMonitorRow
from vidproof.domain.videos import VideoRecord, VideoType

REJECTION_MESSAGE = (
    "⚠️ Tu evidencia ha sido rechazada. "
    "Por favor, envía una nueva captura de pantalla del video."
)

logger = logging.getLogger(__name__)

Send = Callable[[int], Awaitable[None]]


@dataclass
class NotificationService:
    """Sends messages to participants, tolerating per-recipient failures."""

    telegram_client: TelegramClient
    max_concurrency: int = 10

    async def send_video_sequentially(
        self, chat_ids: Iterable[int], video: str, caption: str
    ) -> BroadcastResult:
        """Send a video to each recipient one after another."""
        result = BroadcastResult()
        for chat_id in chat_ids:
            try:
                await self.telegram_client.send_video(
                    chat_id=chat_id, video=video, caption=caption
                )
            except Exception as exc:
                logger.exception(
                    "Failed to send video", extra={"telegram_id": chat_id}
                )
                result.failed.append((chat_id, _describe(exc)))
                continue
            result.delivered.append(chat_id)
        return result

    async def broadcast(self, chat_ids: Iterable[int], send: Send) -> BroadcastResult:
        """Run ``send`` for every recipient with bounded concurrency."""
        semaphore = asyncio.Semaphore(max(self.max_concurrency, 1))
        recipients = list(chat_ids)

        async def _send_one(chat_id: int) -> None:
            async with semaphore:
                await send(chat_id)

        outcomes = await asyncio.gather(
            *(_send_one(chat_id) for chat_id in recipients), return_exceptions=True
        )
        result = BroadcastResult()
        for chat_id, outcome in zip(recipients, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.warning(
                    "Broadcast delivery failed",
                    extra={"telegram_id": chat_id, "error": _describe(outcome)},
                )
                result.failed.append((chat_id, _describe(outcome)))
            else:
                result.delivered.append(chat_id)
        return result

    async def announce_video(
        self, video: VideoRecord, profiles: list[ProfileRecord]
    ) -> BroadcastResult:
        """Tell every profile about a video: link as text, hosted as video."""
        chat_ids = [profile.telegram_id for profile in profiles]
        if video.video_type is VideoType.LINK:
            text = (
                f"📹 ¡Nuevo video disponible!\n\n*{escape_markdown(video.title)}*\n\n"
                f"🔗 Link: {video.url}\n\n"
                "Por favor, ve el video y envía una captura de pantalla como evidencia."
            )

            async def send_link(chat_id: int) -> None:
                await self.telegram_client.send_message(chat_id=chat_id, text=text)

            return await self.broadcast(chat_ids, send_link)

        reference = video.telegram_file_id or video.url
        caption = video_caption(video.title)

        async def send_file(chat_id: int) -> None:
            await self.telegram_client.send_video(
                chat_id=chat_id, video=reference, caption=caption
            )

        return await self.broadcast(chat_ids, send_file)

    async def send_reminders(self, rows: list[TaskMonitorRow]) -> BroadcastResult:
        """Send one reminder per participant listing their pending videos."""
        pending: dict[int, tuple[str, list[str]]] = {}
        for row in rows:
            _, titles = pending.setdefault(row.telegram_id, (row.full_name, []))
            titles.append(row.video_title)

        async def send_reminder(chat_id: int) -> None:
            name, titles = pending[chat_id]
            listing = "\n".join(f"• {escape_markdown(title)}" for title in titles)
            text = (
                f"⏰ *Recordatorio*\n\nHola {escape_markdown(name)}, "
                f"tienes {len(titles)} video(s) pendiente(s):\n\n{listing}\n\n"
                "Por favor, envía las evidencias correspondientes."
            )
            await self.telegram_client.send_message(chat_id=chat_id, text=text)

        return await self.broadcast(pending.keys(), send_reminder)

    async def notify_rejection(self, telegram_id: int) -> bool:
        """Tell a participant their evidence was rejected; never raises."""
        try:
            await self.telegram_client.send_message(
                chat_id=telegram_id, text=REJECTION_MESSAGE, parse_mode=None
            )
        except Exception:
            logger.exception(
                "Failed to send rejection notice", extra={"telegram_id": telegram_id}
            )
            return False
        return True


def video_caption(title: str) -> str:
    """Caption attached to broadcast videos."""
    return (
        f"📹 *{escape_markdown(title)}*\n\n"
        "⬇️ Descarga este video, resúbelo en tus redes sociales "
        "y envía una captura de pantalla como evidencia."
    )


def _describe(exc: BaseException) -> str:
    detail = str(exc).strip()
    return f"{type(exc).__name__}: {detail}" if detail else type(exc).__name__


def escape_markdown(text: str) -> str:
    """Escape Telegram legacy Markdown control characters."""
    for char in ("_", "*", "`", "["):
        text = text.replace(char, f"\\{char}")
    return text
