from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TEST = "test"


class ReplyBackend(str, Enum):
    CANNED = "canned"
    LIVE = "live"


class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables or a `.env`
    file. Provides strongly typed access to environment values.
    """

    model_config = SettingsConfigDict(
        env_file=".env", extra="ignore", populate_by_name=True
    )

    PROJECT_NAME: str = "ELI5 Bot"
    VERSION: str = "1.0.0"

    APP_ENV: Environment = Environment.DEVELOPMENT
    """Deployment environment; switches the log renderer."""

    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite:///eli5.db"
    """SQLAlchemy URL of the relational store holding users and chats."""

    IDENTITY_PATH: Path = Path.home() / ".eli5" / "identity.json"
    """Where the logged-in user record is kept between reloads."""

    REPLY_BACKEND: ReplyBackend = ReplyBackend.CANNED
    """`canned` keeps the fixed explanation; `live` talks to Gemini."""

    GEMINI_API_KEY: str = Field(
        default="",
        validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY"),
    )
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    GEMINI_MODEL: str = "gemini-3-flash-preview"

    REPLY_PROXY_URL: str = "http://localhost:8787"
    PROXY_PORT: int = 8787

    @field_validator("*", mode="before")
    @classmethod
    def strip_quotes(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().replace('"', "").replace("'", "")
        return value

    @property
    def has_direct_credentials(self) -> bool:
        """True when this process may call the secret-bearing service itself."""
        return bool(self.GEMINI_API_KEY)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
