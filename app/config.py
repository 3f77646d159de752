"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_STORAGE_KEY = "favorites"


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="Item Browser", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    records_api_url: HttpUrl = Field(
        default="https://jsonplaceholder.typicode.com", alias="RECORDS_API_URL"
    )
    records_path: str = Field(default="/posts", alias="RECORDS_PATH")

    pregenerate_count: int = Field(
        default=10, alias="PREGENERATE_COUNT", ge=0, le=1_000
    )
    pregenerate_source: Literal["prefix", "collection"] = Field(
        default="prefix", alias="PREGENERATE_SOURCE"
    )
    on_demand_fallback: bool = Field(default=True, alias="ON_DEMAND_FALLBACK")

    client_id_ceiling: int = Field(default=1_000, alias="CLIENT_ID_CEILING", ge=1)
    announcement_clear_seconds: float = Field(
        default=2.0, alias="ANNOUNCEMENT_CLEAR_SECONDS", gt=0
    )
    favorites_storage_key: str = Field(
        default=DEFAULT_STORAGE_KEY, alias="FAVORITES_STORAGE_KEY"
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./itembrowser.db", alias="DATABASE_URL"
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("records_path", mode="before")
    @classmethod
    def _normalise_records_path(cls, value: object) -> str:
        """Ensure the collection path is rooted and has no trailing slash."""

        text = str(value or "").strip().strip("/")
        if not text:
            raise ValueError("RECORDS_PATH may not be empty")
        return f"/{text}"

    @field_validator("favorites_storage_key", mode="before")
    @classmethod
    def _default_blank_storage_key(cls, value: object) -> str:
        if value is None:
            return DEFAULT_STORAGE_KEY
        text = str(value).strip()
        return text or DEFAULT_STORAGE_KEY

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
