"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    telegram_bot_token: str
    supabase_url: str
    supabase_service_key: str
    admin_token: str
    cron_secret: str | None = None
    app_url: str | None = None
    evidence_bucket: str = "evidencias"
    video_bucket: str = "videos"
    video_ttl_days: int = 7
    session_backend: str = "memory"
    session_ttl_seconds: int = 86400
    broadcast_concurrency: int = 10
    display_timezone: str = "America/Lima"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def webhook_url(app_url: str | None) -> str | None:
    """Build the public Telegram webhook URL from the app base URL."""
    if app_url is None:
        return None
    cleaned = app_url.strip().rstrip("/")
    if not cleaned:
        return None
    return f"{cleaned}/telegram/webhook"
