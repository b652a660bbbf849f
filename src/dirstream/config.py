# Settings for dirstream, loaded from the environment and an optional .env file.
# Created: 2026-10-12
#
# Core classes take a Settings instance in their constructor. get_settings()
# is only used at the application edge (API dependencies, CLI).

from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_UPSTREAM_URL = "http://cdn.dflix.live"
DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


class Settings(BaseSettings):
    """Runtime configuration."""

    model_config = SettingsConfigDict(
        env_prefix="DIRSTREAM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    upstream_url: str = Field(
        default=DEFAULT_UPSTREAM_URL,
        validation_alias=AliasChoices("DIRSTREAM_UPSTREAM_URL", "HTTP_SERVER_URL", "upstream_url"),
        description="Base URL of the server whose directory index is browsed",
    )
    listing_timeout: float = Field(
        default=10.0, gt=0, description="Deadline (seconds) for listing GETs and HEAD requests"
    )
    stream_timeout: float | None = Field(
        default=30.0,
        description="Deadline (seconds) for a whole data stream, measured from request start. "
        "None disables it.",
    )
    user_agent: str = DEFAULT_USER_AGENT
    chunk_size: int = Field(default=64 * 1024, gt=0)

    host: str = "0.0.0.0"
    port: int = Field(
        default=5000, validation_alias=AliasChoices("DIRSTREAM_PORT", "PORT", "port")
    )
    cors_allowed_origins: list[str] = ["*"]
    log_level: str = "INFO"

    @field_validator("upstream_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("upstream_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("stream_timeout")
    @classmethod
    def _non_positive_disables(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            return None
        return v

    @classmethod
    def load(cls, **overrides) -> Settings:
        """Build settings from the environment, applying explicit overrides."""
        return cls(**overrides)


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings for the application edge."""
    return Settings.load()
