from __future__ import annotations

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

load_dotenv()


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "y", "on"}


class AppSettings(BaseModel):
    """Runtime configuration for the API process."""

    app_name: str = Field(default="BookTrack API", alias="APP_NAME")
    database_url: str = Field(default="sqlite:///./booktrack.db", alias="DATABASE_URL")
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")
    database_pool_size: int = Field(default=10, alias="DATABASE_POOL_SIZE", ge=1)
    database_max_overflow: int = Field(default=0, alias="DATABASE_MAX_OVERFLOW", ge=0)
    database_create_tables: bool = Field(default=True, alias="DATABASE_CREATE_TABLES")
    api_prefix: str = Field(default="/api", alias="API_PREFIX")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"], alias="CORS_ORIGINS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = {"populate_by_name": True}

    @field_validator("api_prefix", mode="before")
    @classmethod
    def _normalize_prefix(cls, value: str | None) -> str:
        stripped = (value or "").strip("/")
        return "/" + stripped if stripped else ""

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: str | list[str] | None) -> list[str]:
        if value is None:
            return ["*"]
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()] or ["*"]
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: str | None) -> str:
        if value is None:
            return "INFO"
        return value.upper()

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> AppSettings:
    """Load application configuration from environment variables."""
    return AppSettings(
        app_name=os.getenv("APP_NAME", "BookTrack API"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./booktrack.db"),
        database_echo=_as_bool(os.getenv("DATABASE_ECHO"), default=False),
        database_pool_size=int(os.getenv("DATABASE_POOL_SIZE", "10")),
        database_max_overflow=int(os.getenv("DATABASE_MAX_OVERFLOW", "0")),
        database_create_tables=_as_bool(os.getenv("DATABASE_CREATE_TABLES"), default=True),
        api_prefix=os.getenv("API_PREFIX", "/api"),
        cors_origins=os.getenv("CORS_ORIGINS", "*"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
