"""Scheduled job endpoints guarded by a bearer secret."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from vidproof.containers import AppContainer

router = APIRouter(prefix="/cron", tags=["cron"])
logger = logging.getLogger(__name__)


def _get_cron_secret(request: Request) -> str | None:
    container: AppContainer = request.app.state.container
    return container.settings.cron_secret


async def require_cron_secret(
    authorization: str | None = Header(default=None),
    cron_secret: str | None = Depends(_get_cron_secret),
) -> None:
    """Ensure requests carry ``Authorization: Bearer <CRON_SECRET>``."""
    if not cron_secret or authorization != f"Bearer {cron_secret}":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/cleanup-videos", dependencies=[Depends(require_cron_secret)])
async def cleanup_videos(request: Request) -> dict[str, object]:
    """Deactivate expired videos and delete their hosted files."""
    container: AppContainer = request.app.state.container
    try:
        summary = container.video_service.cleanup_expired()
    except Exception as exc:
        logger.exception("Expired video cleanup failed")
        raise HTTPException(status_code=500, detail="Internal error") from exc
    return {
        "success": True,
        "total": summary.total,
        "removed": summary.removed,
        "errors": summary.errors,
    }


@router.get("/reminders", dependencies=[Depends(require_cron_secret)])
async def send_reminders(request: Request) -> dict[str, object]:
    """Remind every participant with pending tasks."""
    container: AppContainer = request.app.state.container
    try:
        rows = container.task_service.pending_rows()
    except Exception as exc:
        logger.exception("Failed to load pending tasks for reminders")
        raise HTTPException(status_code=500, detail="Internal error") from exc
    result = await container.notification_service.send_reminders(rows)
    return {"success": True, **result.as_dict()}
