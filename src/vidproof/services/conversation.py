"""Conversation state machine for inbound bot messages."""

import asyncio
import logging
import weakref
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo

from vidproof.adapters.telegram_client import TelegramClient
from vidproof.api.telegram_models import TelegramMessage, TelegramVideo
from vidproof.domain.models import ProfileRecord
from vidproof.domain.sessions import SessionStep, UploadSession
from vidproof.domain.tasks import PendingReport, TaskRecord, TaskStatus
from vidproof.services.evidence import EvidenceService, EvidenceSubmissionError
from vidproof.services.notifications import (
    NotificationService,
    escape_markdown,
    video_caption,
)
from vidproof.services.profiles import InvalidNameError, ProfileService
from vidproof.services.sessions import SessionStore
from vidproof.services.tasks import TaskService
from vidproof.services.videos import VideoService
from vidproof.telegram_commands import MY_EVIDENCE_ALIAS, BotCommand, parse_command

RECENT_TASKS_LIMIT = 10
SEPARATOR = "───────────────────"
GENERIC_ERROR_TEXT = "Ocurrió un error. Por favor, intenta de nuevo."

logger = logging.getLogger(__name__)


@dataclass
class ConversationService:
    """Routes one inbound message and runs the matching flow.

    Upload state lives in ``session_store``. Messages from the same
    participant are handled one at a time.
    """

    telegram_client: TelegramClient
    session_store: SessionStore
    profile_service: ProfileService
    video_service: VideoService
    task_service: TaskService
    evidence_service: EvidenceService
    notification_service: NotificationService
    display_timezone: str = "America/Lima"
    debug: bool = False
    _locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = field(
        default_factory=weakref.WeakValueDictionary, init=False, repr=False
    )

    async def handle_message(self, message: TelegramMessage) -> None:
        """Dispatch a message, serialized per participant."""
        telegram_id = message.from_user.id
        lock = self._locks.get(telegram_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[telegram_id] = lock
        async with lock:
            try:
                await self._dispatch(message)
            except Exception as exc:
                logger.exception(
                    "Failed to handle message", extra={"telegram_id": telegram_id}
                )
                await self._send(
                    message.chat.id, self._error_text(exc, GENERIC_ERROR_TEXT)
                )

    async def _dispatch(self, message: TelegramMessage) -> None:  # noqa: PLR0911
        telegram_id = message.from_user.id
        chat_id = message.chat.id
        command = parse_command(message.text)

        if command == BotCommand.START.text:
            self.session_store.delete(telegram_id)
            await self._handle_start(telegram_id, chat_id)
            return
        if command == BotCommand.VIDEO.text:
            await self._handle_video_command(telegram_id, chat_id)
            return
        if command == BotCommand.REPORT.text:
            await self._handle_report(chat_id)
            return
        if command in {BotCommand.MY_EVIDENCE.text, MY_EVIDENCE_ALIAS}:
            await self._handle_my_tasks(telegram_id, chat_id)
            return
        if command == BotCommand.CANCEL.text:
            self.session_store.delete(telegram_id)
            await self._send(chat_id, "❌ Operación cancelada.")
            return

        session = self.session_store.get(telegram_id)
        if message.video is not None:
            if session is not None and session.step is SessionStep.AWAITING_VIDEO:
                await self._handle_video_received(telegram_id, chat_id, message.video)
            else:
                await self._send(
                    chat_id, "Para subir un video, primero envía el comando /video"
                )
            return
        if message.photo:
            await self._handle_photo(telegram_id, chat_id, message)
            return
        if message.text:
            if (
                session is not None
                and session.step is SessionStep.AWAITING_TITLE
                and session.pending_video_ref
            ):
                await self._handle_video_title(
                    telegram_id, chat_id, message.text, session.pending_video_ref
                )
            else:
                await self._handle_text(telegram_id, chat_id, message.text)

    async def _handle_start(self, telegram_id: int, chat_id: int) -> None:
        profile = self.profile_service.get_by_telegram_id(telegram_id)
        if profile:
            await self._send(
                chat_id,
                f"¡Hola de nuevo, {escape_markdown(profile.full_name)}! 👋\n\n"
                "Envía una captura de pantalla para registrar tu evidencia.",
            )
            return
        await self._send(
            chat_id,
            "¡Bienvenido a VidProof! 🎬\n\n"
            "Por favor, envía tu *nombre completo* para registrarte.",
        )

    async def _handle_text(self, telegram_id: int, chat_id: int, text: str) -> None:
        profile = self.profile_service.get_by_telegram_id(telegram_id)
        if profile:
            await self._send(
                chat_id,
                f"Hola {escape_markdown(profile.full_name)}, para registrar una "
                "evidencia, envía una *foto* (captura de pantalla del video).",
            )
            return
        try:
            created = self.profile_service.register(telegram_id, text)
        except InvalidNameError:
            await self._send(
                chat_id, "Por favor, envía un nombre válido (mínimo 3 caracteres)."
            )
            return
        except Exception as exc:
            logger.exception("Registration failed", extra={"telegram_id": telegram_id})
            await self._send(
                chat_id,
                self._error_text(
                    exc, "Hubo un error al registrarte. Por favor, intenta de nuevo."
                ),
            )
            return
        await self._send(
            chat_id,
            f"¡Registro exitoso, {escape_markdown(created.full_name)}! ✅\n\n"
            "Cuando veas un video, envía una captura de pantalla como evidencia.",
        )

    async def _handle_photo(
        self, telegram_id: int, chat_id: int, message: TelegramMessage
    ) -> None:
        profile = self.profile_service.get_by_telegram_id(telegram_id)
        if profile is None:
            await self._send(
                chat_id, "Primero debes registrarte. Envía /start para comenzar."
            )
            return
        task = self.evidence_service.oldest_pending(profile)
        if task is None:
            await self._send(
                chat_id,
                "¡No tienes tareas pendientes! 🎉 Ya completaste todas tus evidencias.",
            )
            return
        photo = message.largest_photo()
        if photo is None:
            await self._send(chat_id, "Error al procesar la imagen. Intenta de nuevo.")
            return
        try:
            receipt = await self.evidence_service.submit(profile, task, photo.file_id)
        except EvidenceSubmissionError as exc:
            await self._send(chat_id, exc.user_message)
            return

        title = escape_markdown(task.video_title or "el video")
        if receipt.remaining_pending is None:
            remaining = ""
        elif receipt.remaining_pending > 0:
            remaining = (
                f"\n\nTienes {receipt.remaining_pending} tarea(s) pendiente(s)."
            )
        else:
            remaining = "\n\n¡Has completado todas tus tareas! 🎉"
        await self._send(chat_id, f"✅ ¡Evidencia recibida para *{title}*!{remaining}")

    async def _handle_video_command(self, telegram_id: int, chat_id: int) -> None:
        self.session_store.set(
            telegram_id, UploadSession(step=SessionStep.AWAITING_VIDEO)
        )
        await self._send(
            chat_id,
            "📹 *Subir Nuevo Video*\n\n"
            "Envía el video que quieres compartir con todos los participantes.\n\n"
            "⚠️ El video será comprimido automáticamente por Telegram.",
        )

    async def _handle_video_received(
        self, telegram_id: int, chat_id: int, video: TelegramVideo
    ) -> None:
        self.session_store.set(
            telegram_id,
            UploadSession(
                step=SessionStep.AWAITING_TITLE, pending_video_ref=video.file_id
            ),
        )
        size_mb = round((video.file_size or 0) / 1024 / 1024, 2)
        await self._send(
            chat_id,
            f"✅ Video recibido ({size_mb} MB)\n\nAhora envía el *título* del video:",
        )

    async def _handle_video_title(
        self, telegram_id: int, chat_id: int, title: str, file_id: str
    ) -> None:
        await self._send(
            chat_id, "⏳ Procesando y enviando video a todos los participantes..."
        )
        try:
            publication = self.video_service.create_telegram_video(title, file_id)
        except Exception as exc:
            logger.exception(
                "Failed to create video", extra={"telegram_id": telegram_id}
            )
            self.session_store.delete(telegram_id)
            await self._send(
                chat_id, self._error_text(exc, "❌ Error al guardar el video.")
            )
            return

        if not publication.recipients:
            self.session_store.delete(telegram_id)
            await self._send(
                chat_id,
                "⚠️ Video guardado pero no hay usuarios registrados para notificar.",
            )
            return

        clean_title = escape_markdown(publication.video.title)
        result = await self.notification_service.send_video_sequentially(
            [profile.telegram_id for profile in publication.recipients],
            file_id,
            video_caption(publication.video.title),
        )
        self.session_store.delete(telegram_id)
        await self._send(
            chat_id,
            "✅ *Video publicado exitosamente!*\n\n📊 Resumen:\n"
            f"• Título: *{clean_title}*\n"
            f"• Enviado a: {result.delivered_count} usuarios\n"
            f"• Fallidos: {result.failed_count}\n"
            f"• Expira en: {self.video_service.ttl_days} días\n\n"
            "Los usuarios deben enviar una captura de pantalla como evidencia.",
        )

    async def _handle_report(self, chat_id: int) -> None:
        try:
            report = self.task_service.pending_report()
        except Exception as exc:
            logger.exception("Failed to build pending report")
            await self._send(
                chat_id, self._error_text(exc, "Error al generar el reporte.")
            )
            return
        await self._send(chat_id, format_pending_report(report))

    async def _handle_my_tasks(self, telegram_id: int, chat_id: int) -> None:
        profile = self.profile_service.get_by_telegram_id(telegram_id)
        if profile is None:
            await self._send(
                chat_id, "No estás registrado. Envía /start para registrarte primero."
            )
            return
        tasks = self.task_service.recent_for_profile(profile.id, RECENT_TASKS_LIMIT)
        await self._send(
            chat_id, format_my_tasks(profile, tasks, ZoneInfo(self.display_timezone))
        )

    async def _send(self, chat_id: int, text: str) -> None:
        await self.telegram_client.send_message(chat_id=chat_id, text=text)

    def _error_text(self, exc: Exception, fallback: str) -> str:
        """Return a user-facing error message with local debug info."""
        if self.debug:
            detail = f"{type(exc).__name__}: {exc}".strip()
            if detail:
                return f"{fallback} (debug: {escape_markdown(detail)})"
        return fallback


def format_pending_report(report: PendingReport) -> str:
    """Format pending tasks grouped by participant."""
    if not report.groups:
        return (
            "✅ *Reporte de Pendientes*\n\n"
            "¡Excelente! Todos los usuarios han completado sus tareas."
        )
    lines = [
        "📊 *Reporte de Tareas Pendientes*",
        "",
        f"Total de tareas pendientes: {report.total_pending}",
        f"Usuarios con pendientes: {len(report.groups)}",
        "",
        SEPARATOR,
        "",
    ]
    for group in report.groups:
        lines.append(
            f"👤 *{escape_markdown(group.full_name)}* ({len(group.video_titles)})"
        )
        lines.extend(f"   • {escape_markdown(title)}" for title in group.video_titles)
        lines.append("")
    return "\n".join(lines).rstrip()


def format_my_tasks(
    profile: ProfileRecord, tasks: list[TaskRecord], tz: ZoneInfo
) -> str:
    """Format a participant's latest tasks with completion counters."""
    name = escape_markdown(profile.full_name)
    if not tasks:
        return f"👤 *{name}*\n\nNo tienes tareas asignadas aún."
    lines = [f"👤 *{name}*", "", "📋 *Tus últimas tareas:*", ""]
    completed = 0
    pending = 0
    for task in tasks:
        title = escape_markdown(task.video_title or "Video desconocido")
        if task.status is TaskStatus.DONE:
            completed += 1
            delivered = (
                task.delivered_at.astimezone(tz).strftime("%d/%m/%Y %H:%M")
                if task.delivered_at
                else "Sin fecha"
            )
            lines.append(f"✅ *{title}*")
            lines.append(f"   Completado: {delivered}")
            if task.evidence_url:
                lines.append(f"   📸 [Ver evidencia]({task.evidence_url})")
        else:
            pending += 1
            lines.append(f"⏳ *{title}* - Pendiente")
        lines.append("")
    lines.append(SEPARATOR)
    lines.append(f"✅ Completadas: {completed}")
    lines.append(f"⏳ Pendientes: {pending}")
    return "\n".join(lines)
