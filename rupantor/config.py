"""
Configuration and settings for the Rupantor backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in (value or "").split(",") if item.strip()]


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")
    cors_allow_origins: str = Field(default="*")

    # Key-value store: SQLAlchemy URL or Redis, in-memory otherwise
    database_url: Optional[str] = Field(default=None)
    redis_url: Optional[str] = Field(default=None)
    redis_key_prefix: str = Field(default="rupantor:")

    # Identity provider (Supabase auth)
    supabase_url: Optional[str] = Field(default=None)
    supabase_service_role_key: Optional[str] = Field(default=None)
    identity_timeout_seconds: float = Field(default=10.0)

    # Emails that receive the admin role when they sign up
    bootstrap_admin_emails: str = Field(default="")

    chat_poll_interval_seconds: int = Field(default=3, ge=1)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    @property
    def admin_emails(self) -> set[str]:
        return {email.lower() for email in _split_csv(self.bootstrap_admin_emails)}

    @property
    def cors_origins(self) -> list[str]:
        return _split_csv(self.cors_allow_origins) or ["*"]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
