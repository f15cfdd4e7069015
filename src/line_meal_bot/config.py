"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    line_channel_secret: str
    line_channel_access_token: str
    supabase_url: str
    supabase_service_key: str
    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = None
    openai_store: bool = False
    timezone: str = "Asia/Tokyo"
    ai_daily_limit: int = 20
    liff_id: str | None = None
    app_url: str = "http://localhost:3000"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def counseling_url(self) -> str:
        """Return the counseling page URL, preferring the LIFF app."""
        if self.liff_id:
            return f"https://liff.line.me/{self.liff_id}/counseling"
        return f"{self.app_url.rstrip('/')}/counseling"

    def quota_limits(self) -> dict[str, int]:
        """Return daily ceilings per metered feature."""
        return {"ai": self.ai_daily_limit}
