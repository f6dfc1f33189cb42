"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables, with an optional .env file
as a fallback. Nothing here is secret, so every field has a working default and
the service starts with an empty environment.

Pydantic Settings automatically:
  1. Reads from environment variables (highest priority)
  2. Falls back to .env file values
  3. Uses defaults defined here (lowest priority)

Usage:
    from ledger.config import settings
    print(settings.POST_MAX_RETRIES)
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the Ledger API."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Application ---
    APP_NAME: str = "Ledger API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # --- Database ---
    # SQLite for local runs; point at postgresql+asyncpg://... in production
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/ledger.db"

    # --- Posting ---
    # Re-read + re-save attempts after an optimistic-lock conflict on the account row
    POST_MAX_RETRIES: int = Field(default=3, ge=1)

    # Deadline for a single post, covering every store call it makes
    POST_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0)

    # Outbound status reported when the optimistic-lock retries run out
    CONCURRENT_UPDATE_STATUS: Literal["ABORTED", "INTERNAL"] = "ABORTED"


# Singleton: import this instance everywhere instead of creating new Settings()
settings = Settings()
