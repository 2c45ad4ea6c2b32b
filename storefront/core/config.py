"""
storefront/core/config.py
─────────────────────────
Centralised, type-safe settings powered by pydantic-settings.
Every value can be overridden from the environment or a .env file.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    APP_ENV: str = "development"
    APP_SECRET_KEY: str = "change-me-in-production"
    APP_DEBUG: bool = False

    DATABASE_URL: str = "sqlite:///./storefront.db"
    SEED_ON_STARTUP: bool = False

    # Session tokens
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Shopping assistant
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o"
    ASSISTANT_MAX_TOOL_ROUNDS: int = 3

    # Dynamic pricing
    PRICING_REGION: str = "US"

    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:8000"

    @field_validator("PRICING_REGION")
    @classmethod
    def region_upper(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("PRICING_REGION must not be empty.")
        return v

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def is_sqlite(self) -> bool:
        return "sqlite" in self.DATABASE_URL

    @property
    def assistant_enabled(self) -> bool:
        return bool(self.OPENAI_API_KEY and self.OPENAI_API_KEY.strip())


@lru_cache
def get_settings() -> Settings:
    """Return a cached singleton of Settings."""
    return Settings()
