"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_keys: str
    openai_model: str = "gpt-4o-mini"
    openai_timeout_seconds: float = 30.0
    analysis_seed: int = 42
    key_selection: str = "random"
    state_path: str = ".nutrivision/state.json"
    timezone: str | None = None
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_api_keys(raw: str | None) -> list[str]:
    """Parse a comma-separated API key list from env."""
    if raw is None:
        return []
    return [chunk.strip() for chunk in raw.split(",") if chunk.strip()]
