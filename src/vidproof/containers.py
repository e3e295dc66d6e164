"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import Client, create_client

from vidproof.adapters.supabase_profile_repository import SupabaseProfileRepository
from vidproof.adapters.supabase_session_store import SupabaseSessionStore
from vidproof.adapters.supabase_storage import SupabaseObjectStorage
from vidproof.adapters.supabase_task_repository import SupabaseTaskRepository
from vidproof.adapters.supabase_video_repository import SupabaseVideoRepository
from vidproof.adapters.telegram_client import HttpxTelegramClient, TelegramClient
from vidproof.adapters.telegram_file_client import (
    HttpxTelegramFileClient,
    TelegramFileClient,
)
from vidproof.config import Settings
from vidproof.services.conversation import ConversationService
from vidproof.services.evidence import EvidenceService
from vidproof.services.notifications import NotificationService
from vidproof.services.profiles import ProfileService
from vidproof.services.sessions import InMemorySessionStore, SessionStore
from vidproof.services.tasks import TaskService
from vidproof.services.videos import VideoService

SESSION_BACKENDS = ("memory", "supabase")


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    telegram_client: TelegramClient
    telegram_file_client: TelegramFileClient
    session_store: SessionStore
    profile_service: ProfileService
    video_service: VideoService
    task_service: TaskService
    evidence_service: EvidenceService
    notification_service: NotificationService
    conversation_service: ConversationService
    close_resources: Callable[[], Awaitable[None]]


def build_session_store(settings: Settings, client: Client) -> SessionStore:
    """Pick the session backend named in settings."""
    backend = settings.session_backend.strip().lower()
    if backend == "memory":
        return InMemorySessionStore(ttl_seconds=settings.session_ttl_seconds)
    if backend == "supabase":
        return SupabaseSessionStore(client, ttl_seconds=settings.session_ttl_seconds)
    raise ValueError(
        f"Unknown session backend {settings.session_backend!r}; "
        f"expected one of {', '.join(SESSION_BACKENDS)}"
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    profile_repository = SupabaseProfileRepository(supabase_client)
    video_repository = SupabaseVideoRepository(supabase_client)
    task_repository = SupabaseTaskRepository(supabase_client)
    evidence_storage = SupabaseObjectStorage(
        supabase_client, resolved_settings.evidence_bucket
    )
    video_storage = SupabaseObjectStorage(
        supabase_client, resolved_settings.video_bucket
    )
    session_store = build_session_store(resolved_settings, supabase_client)

    telegram_client = HttpxTelegramClient.create(resolved_settings.telegram_bot_token)
    telegram_file_client = HttpxTelegramFileClient.create(
        resolved_settings.telegram_bot_token
    )
    notification_service = NotificationService(
        telegram_client, max_concurrency=resolved_settings.broadcast_concurrency
    )
    profile_service = ProfileService(
        repository=profile_repository,
        video_repository=video_repository,
        task_repository=task_repository,
    )
    video_service = VideoService(
        repository=video_repository,
        profile_repository=profile_repository,
        task_repository=task_repository,
        storage=video_storage,
        ttl_days=resolved_settings.video_ttl_days,
    )
    task_service = TaskService(
        task_repository, rejection_notifier=notification_service.notify_rejection
    )
    evidence_service = EvidenceService(
        task_repository=task_repository,
        file_client=telegram_file_client,
        storage=evidence_storage,
    )
    conversation_service = ConversationService(
        telegram_client=telegram_client,
        session_store=session_store,
        profile_service=profile_service,
        video_service=video_service,
        task_service=task_service,
        evidence_service=evidence_service,
        notification_service=notification_service,
        display_timezone=resolved_settings.display_timezone,
        debug=resolved_settings.environment == "local",
    )

    async def close_resources() -> None:
        await telegram_client.close()
        await telegram_file_client.close()

    return AppContainer(
        settings=resolved_settings,
        telegram_client=telegram_client,
        telegram_file_client=telegram_file_client,
        session_store=session_store,
        profile_service=profile_service,
        video_service=video_service,
        task_service=task_service,
        evidence_service=evidence_service,
        notification_service=notification_service,
        conversation_service=conversation_service,
        close_resources=close_resources,
    )
