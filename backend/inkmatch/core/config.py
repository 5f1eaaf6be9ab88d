# backend/inkmatch/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug("[CONFIG] Looking for .env at: %s (exists=%s)", env_path, env_path.exists())
    load_dotenv(env_path)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    environment: str = Field(default="development", description="Deployment environment name")
    log_level: str = Field(default="INFO", description="Root log level")

    database_url: str = Field(
        default="sqlite:///./inkmatch.db",
        description="SQLAlchemy database URL for the profile store",
    )
    database_echo: bool = False

    # Profile search
    search_default_page_size: int = Field(default=12, ge=1)
    search_max_page_size: int = Field(default=50, ge=1, le=50)
    search_distance_unit: Literal["mi", "km"] = Field(
        default="mi",
        description="Unit for maxDistance and reported result distances",
    )
    search_debounce_ms: int = Field(
        default=300,
        ge=0,
        description="Client-side debounce window for the free-text search field",
    )
    search_history_limit: int = Field(default=10, ge=1)
    search_suggestion_limit: int = Field(default=5, ge=1)

    # Saved searches
    saved_search_limit: int = Field(default=50, ge=1, description="Max saved searches per owner")

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return (value or "INFO").strip().upper()

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()
