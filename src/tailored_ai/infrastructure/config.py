"""Application configuration — loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from env vars (or ``.env`` file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Without an AI key the assistant runs on pattern matching alone.
    ai_api_key: SecretStr | None = None
    ai_model: str = "gpt-4o-mini"
    ai_base_url: str | None = None
    ai_timeout_seconds: float = 30.0

    github_token: SecretStr | None = None
    github_max_retries: int = 3
    github_retry_base_delay: float = 1.0

    cache_ttl_seconds: int = 3600
    cache_file: str | None = None
    readme_token_budget: int = 4_000
    max_chat_sessions: int = 1_000

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton application settings (cached after first call)."""
    return Settings()
