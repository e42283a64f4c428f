"""Application configuration settings."""
from __future__ import annotations

import os
from functools import lru_cache

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Runtime toggles -----------------------------------------------------
# Execution environment: "dev" | "staging" | "prod"
ENV = os.getenv("APP_ENV", "dev").lower()

DEV_ENVIRONMENTS = {"dev", "local", "test"}


class Settings(BaseSettings):
    """Environment configuration for the Translance backend."""

    app_env: str = Field(default=ENV, validation_alias=AliasChoices("APP_ENV", "app_env"))
    database_url: str = "sqlite:///translance.db"
    SECRET_KEY: str = "change-me"
    SESSION_TTL_DAYS: int = 7
    LOG_LEVEL: str = "INFO"
    CORS_ALLOW_ORIGINS: list[str] = ["http://localhost:3000"]
    SENTRY_DSN: str | None = None
    PROMETHEUS_ENABLED: bool = True
    ALLOW_DB_CREATE_ALL: bool = False

    # --- Payments (Stripe) -----------------------------------------------
    STRIPE_ENABLED: bool = False
    STRIPE_SECRET_KEY: str | None = None
    PAYMENT_CURRENCY: str = "usd"

    # --- Uploads ---------------------------------------------------------
    UPLOAD_DIR: str = "uploads"
    MAX_PROJECT_FILES: int = 5
    MAX_PROJECT_FILE_BYTES: int = 10 * 1024 * 1024
    MAX_PROFILE_PICTURE_BYTES: int = 2 * 1024 * 1024

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="", env_file_encoding="utf-8"
    )

    @field_validator("STRIPE_SECRET_KEY", "SENTRY_DSN")
    @classmethod
    def _strip_empty_secret(cls, value: str | None) -> str | None:
        """Normalise empty secrets to ``None`` for easier validation."""

        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    @property
    def is_dev(self) -> bool:
        return self.app_env.lower() in DEV_ENVIRONMENTS


class AppInfo(BaseModel):
    name: str = "translance-backend"
    version: str = "0.1.0"


settings = Settings()


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return settings


__all__ = [
    "ENV",
    "DEV_ENVIRONMENTS",
    "Settings",
    "AppInfo",
    "settings",
    "get_settings",
]
