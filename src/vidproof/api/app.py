"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from vidproof.api.admin import router as admin_router
from vidproof.api.cron import router as cron_router
from vidproof.api.telegram_models import TelegramUpdate
from vidproof.app_logging import configure_logging
from vidproof.containers import AppContainer
from vidproof.telegram_commands import CHAT_MENU_BUTTON, telegram_commands


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            await app.state.container.telegram_client.set_my_commands(
                telegram_commands()
            )
            await app.state.container.telegram_client.set_chat_menu_button(
                CHAT_MENU_BUTTON
            )
        except Exception:
            logger.exception("Failed to sync Telegram bot commands")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)
    app.include_router(cron_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/telegram/webhook")
    async def telegram_webhook_status() -> dict[str, str]:
        """Report that the webhook endpoint is reachable."""
        return {"status": "Bot webhook is running"}

    @app.post("/telegram/webhook")
    async def telegram_webhook(request: Request) -> dict[str, bool]:
        """Handle Telegram webhook updates.

        Always acknowledges so Telegram never re-delivers an update.
        """
        state_container: AppContainer = request.app.state.container
        try:
            update = TelegramUpdate.model_validate(await request.json())
            if update.message is not None:
                await state_container.conversation_service.handle_message(
                    update.message
                )
        except Exception:
            logger.exception("Webhook error")
        return {"ok": True}

    return app
