"""Admin API endpoints with simple token auth."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    Header,
    HTTPException,
    Query,
    Request,
    UploadFile,
    status,
)
from pydantic import BaseModel

from vidproof.config import webhook_url
from vidproof.domain.models import ProfileRecord
from vidproof.domain.tasks import TaskMonitorRow
from vidproof.domain.videos import VideoRecord
from vidproof.services.profiles import InvalidNameError
from vidproof.services.videos import VideoPublication

if TYPE_CHECKING:
    from vidproof.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)


class ProfileCreate(BaseModel):
    """Administrative profile registration."""

    telegram_id: int
    full_name: str


class LinkVideoCreate(BaseModel):
    """Externally hosted video."""

    title: str
    url: str
    description: str | None = None


class VideoStatusUpdate(BaseModel):
    """Active flag toggle."""

    active: bool


class TestMessage(BaseModel):
    """Ad-hoc message for checking the bot token."""

    chat_id: int
    message: str


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/stats", dependencies=[Depends(require_admin)])
async def dashboard_stats(request: Request) -> dict[str, object]:
    """Return dashboard counters."""
    container: AppContainer = request.app.state.container
    stats = container.task_service.get_stats()
    return {
        "active_profiles": stats.active_profiles,
        "active_videos": stats.active_videos,
        "pending_tasks": stats.pending_tasks,
        "completed_tasks": stats.completed_tasks,
        "completion_rate": stats.completion_rate,
    }


@router.get("/tasks", dependencies=[Depends(require_admin)])
async def list_tasks(
    request: Request,
    status_filter: str | None = Query(default=None, alias="status"),
    video_id: str | None = None,
    profile_id: str | None = None,
) -> dict[str, object]:
    """Return monitor rows with optional filters."""
    container: AppContainer = request.app.state.container
    try:
        rows = container.task_service.list_monitor(
            status=status_filter, video_id=video_id, profile_id=profile_id
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"tasks": [_serialize_task_row(row) for row in rows]}


@router.post("/tasks/{task_id}/reject", dependencies=[Depends(require_admin)])
async def reject_task(task_id: UUID, request: Request) -> dict[str, object]:
    """Send a task back to pending and notify the participant."""
    container: AppContainer = request.app.state.container
    try:
        task = await container.task_service.reject(task_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"success": True, "task_id": str(task.id)}


@router.get("/profiles", dependencies=[Depends(require_admin)])
async def list_profiles(request: Request) -> dict[str, object]:
    """Return active profiles."""
    container: AppContainer = request.app.state.container
    profiles = container.profile_service.list_active()
    return {"profiles": [_serialize_profile(profile) for profile in profiles]}


@router.post("/profiles", dependencies=[Depends(require_admin)])
async def create_profile(payload: ProfileCreate, request: Request) -> dict[str, object]:
    """Register a participant on their behalf."""
    container: AppContainer = request.app.state.container
    try:
        profile = container.profile_service.register(
            payload.telegram_id, payload.full_name
        )
    except InvalidNameError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"profile": _serialize_profile(profile)}


@router.get("/videos", dependencies=[Depends(require_admin)])
async def list_videos(request: Request) -> dict[str, object]:
    """Return all videos, newest first."""
    container: AppContainer = request.app.state.container
    return {
        "videos": [_serialize_video(v) for v in container.video_service.list_videos()]
    }


@router.post("/videos", dependencies=[Depends(require_admin)])
async def create_link_video(
    payload: LinkVideoCreate, request: Request
) -> dict[str, object]:
    """Publish an externally hosted video and assign it to everyone."""
    container: AppContainer = request.app.state.container
    try:
        publication = container.video_service.create_link_video(
            payload.title, payload.url, payload.description
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _serialize_publication(publication)


@router.post("/videos/upload", dependencies=[Depends(require_admin)])
async def upload_video(
    request: Request,
    title: str = Form(...),
    description: str | None = Form(default=None),
    video_file: UploadFile = File(...),
) -> dict[str, object]:
    """Upload a video file to storage, publish it and assign it to everyone."""
    container: AppContainer = request.app.state.container
    content = await video_file.read()
    try:
        publication = container.video_service.create_file_video(
            title=title,
            filename=video_file.filename or "video.mp4",
            content=content,
            content_type=video_file.content_type,
            description=description,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _serialize_publication(publication)


@router.patch("/videos/{video_id}", dependencies=[Depends(require_admin)])
async def update_video_status(
    video_id: UUID, payload: VideoStatusUpdate, request: Request
) -> dict[str, bool]:
    """Activate or deactivate a video."""
    container: AppContainer = request.app.state.container
    container.video_service.set_active(video_id, payload.active)
    return {"success": True}


@router.delete("/videos/{video_id}", dependencies=[Depends(require_admin)])
async def delete_video(video_id: UUID, request: Request) -> dict[str, bool]:
    """Delete a video."""
    container: AppContainer = request.app.state.container
    container.video_service.delete_video(video_id)
    return {"success": True}


@router.post("/videos/{video_id}/announce", dependencies=[Depends(require_admin)])
async def announce_video(video_id: UUID, request: Request) -> dict[str, object]:
    """Send a video (or its link) to every active participant."""
    container: AppContainer = request.app.state.container
    video = container.video_service.get_video(video_id)
    if video is None:
        raise HTTPException(status_code=404, detail="Video not found")
    profiles = container.profile_service.list_active()
    result = await container.notification_service.announce_video(video, profiles)
    return {"success": True, **result.as_dict()}


@router.post("/telegram/webhook", dependencies=[Depends(require_admin)])
async def configure_webhook(request: Request) -> dict[str, object]:
    """Point the bot's webhook at this deployment."""
    container: AppContainer = request.app.state.container
    url = webhook_url(container.settings.app_url)
    if url is None:
        raise HTTPException(status_code=500, detail="APP_URL is not configured")
    try:
        await container.telegram_client.set_webhook(url, allowed_updates=["message"])
    except Exception as exc:
        logger.exception("Failed to configure webhook")
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"success": True, "webhook_url": url}


@router.get("/telegram/webhook", dependencies=[Depends(require_admin)])
async def webhook_info(request: Request) -> dict[str, object]:
    """Return Telegram's view of the webhook."""
    container: AppContainer = request.app.state.container
    return await container.telegram_client.get_webhook_info()


@router.get("/telegram/me", dependencies=[Depends(require_admin)])
async def bot_info(request: Request) -> dict[str, object]:
    """Validate the bot token and return the bot account."""
    container: AppContainer = request.app.state.container
    try:
        bot = await container.telegram_client.get_me()
    except Exception as exc:
        logger.exception("Failed to reach Telegram")
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"success": True, "bot": bot}


@router.post("/telegram/test-message", dependencies=[Depends(require_admin)])
async def send_test_message(payload: TestMessage, request: Request) -> dict[str, bool]:
    """Send an arbitrary message through the bot."""
    container: AppContainer = request.app.state.container
    try:
        await container.telegram_client.send_message(
            chat_id=payload.chat_id, text=payload.message
        )
    except Exception as exc:
        logger.exception("Failed to send test message")
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"success": True}


def _serialize_profile(profile: ProfileRecord) -> dict[str, object]:
    return {
        "id": str(profile.id),
        "telegram_id": profile.telegram_id,
        "full_name": profile.full_name,
        "active": profile.active,
    }


def _serialize_video(video: VideoRecord) -> dict[str, object]:
    return {
        "id": str(video.id),
        "title": video.title,
        "url": video.url,
        "video_type": video.video_type.value,
        "active": video.active,
        "description": video.description,
        "expires_at": video.expires_at.isoformat() if video.expires_at else None,
    }


def _serialize_publication(publication: VideoPublication) -> dict[str, object]:
    return {
        "video": _serialize_video(publication.video),
        "tasks_created": publication.tasks_created,
        "recipients": len(publication.recipients),
    }


def _serialize_task_row(row: TaskMonitorRow) -> dict[str, object]:
    return {
        "task_id": str(row.task_id),
        "status": row.status.value,
        "evidence_url": row.evidence_url,
        "delivered_at": row.delivered_at.isoformat() if row.delivered_at else None,
        "assigned_at": row.assigned_at.isoformat() if row.assigned_at else None,
        "video_id": str(row.video_id),
        "video_title": row.video_title,
        "profile_id": str(row.profile_id),
        "telegram_id": row.telegram_id,
        "full_name": row.full_name,
    }
