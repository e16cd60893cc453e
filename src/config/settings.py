"""Application-wide configuration loading and validation."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    log_level: str = Field(default="INFO")

    # Management interface (JSON-RPC over HTTP)
    mi_url: str = Field(
        default="http://127.0.0.1:8888/mi",
        description="OpenSIPS mi_http endpoint, e.g. http://opensips:8888/mi",
    )
    mi_timeout: float = Field(default=10.0, gt=0)

    # Event datagram listener
    event_host: str = Field(default="0.0.0.0", description="Local address the UDP listener binds to.")
    event_port: int = Field(default=9000, ge=0, le=65535)
    event_advertise_host: str = Field(
        default="127.0.0.1",
        description="Address OpenSIPS should send events to (used in event_subscribe).",
    )
    event_subscribe_expire: int | None = Field(
        default=None,
        description="Subscription lifetime in seconds. None keeps the server default.",
    )
    event_schema_version: int = Field(
        default=2,
        ge=1,
        le=2,
        description="Wire schema for contact events: 1 = legacy unsigned qval, 2 = signed qval/optional path.",
    )
    event_receive_timeout: float | None = Field(
        default=None,
        description="Optional idle timeout for a single receive; expiry is logged, not fatal.",
    )
    event_queue_size: int = Field(default=1024, ge=1)

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.strip().upper()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
