"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables, with an optional .env file
as a fallback. This keeps secrets out of source code: the .env file is
gitignored and never committed.

Pydantic Settings automatically:
  1. Reads from environment variables (highest priority)
  2. Falls back to .env file values
  3. Uses defaults defined here (lowest priority)

Values are validated on load, so a short JWT secret or an out-of-range bcrypt
work factor stops the process at import time instead of at the first request.

Usage:
    from app.config import settings
    print(settings.JWT_SECRET)
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the Kozarusa API.

    Required fields (no defaults) MUST be set in .env or environment:
      - JWT_SECRET: Used to sign JWT tokens (at least 32 characters)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Application ---
    APP_NAME: str = "Kozarusa API"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: Literal["development", "test", "production"] = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # --- Database ---
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/kozarusa.db"

    # --- Authentication ---
    # REQUIRED: No default, forces the operator to set a real secret
    JWT_SECRET: str = Field(min_length=32)
    ALGORITHM: str = "HS256"
    JWT_EXPIRES_HOURS: int = Field(default=1, gt=0)
    JWT_ISSUER: str = "kozarusa"
    JWT_AUDIENCE: str = "kozarusa.app"

    # --- Password hashing ---
    # bcrypt cost factor: every +1 doubles the hashing time
    BCRYPT_ROUNDS: int = Field(default=12, ge=10, le=15)

    # --- CORS ---
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


# Singleton: import this instance everywhere instead of creating new Settings()
settings = Settings()
