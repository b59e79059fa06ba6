"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    session_duration_minutes: int = 10
    max_distance_km: float = 0.1
    reference_latitude: float = 15.145370
    reference_longitude: float = 120.596070
    expiry_sweep_interval_seconds: int = 60
    notification_webhook_url: str | None = None
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_webhook_url(raw: str | None) -> str | None:
    """Return the push webhook URL, treating blanks as unset."""
    if raw is None:
        return None
    cleaned = raw.strip()
    return cleaned or None
