"""Centralized application configuration using Pydantic Settings.

Loads configuration from environment variables and `.env` file with
full validation, type coercion, and sensible defaults.

Usage:
    from anime_picker.config import get_settings

    settings = get_settings()  # cached singleton
    print(settings.SAMPLER_PER_PAGE)
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file.

    Nothing is required; every field has a default matching the public
    AniList endpoint and the year bounds offered by the picker.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # silently ignore unknown env vars
    )

    # ── Flask ──────────────────────────────────────────────────────────
    FLASK_ENV: str = Field(default="development", description="Flask environment (development/production)")
    FLASK_DEBUG: bool = Field(default=True, description="Enable Flask debug mode")
    SECRET_KEY: str = Field(default="change-me-in-production", description="Flask secret key for sessions")

    # ── AniList GraphQL gateway ───────────────────────────────────────
    ANILIST_API_URL: str = Field(default="https://graphql.anilist.co", description="AniList GraphQL endpoint")
    ANILIST_RATE_LIMIT: float = Field(default=0.0, ge=0.0, description="Min delay between AniList requests (sec)")

    # ── HTTP Client ───────────────────────────────────────────────────
    # None keeps httpx's own default timeout.
    HTTP_TIMEOUT: float | None = Field(default=None, gt=0, description="HTTP request timeout override (seconds)")
    HTTP_MAX_RETRIES: int = Field(default=1, ge=1, le=10, description="Transport attempts per request (429/5xx)")

    # ── Random sampler ────────────────────────────────────────────────
    SAMPLER_MAX_ATTEMPTS: int = Field(default=5, ge=1, le=20, description="Probe-fetch-pick attempts per request")
    SAMPLER_PER_PAGE: int = Field(default=50, ge=1, le=50, description="Page size used for sampling")
    SAMPLER_SORT: str = Field(default="POPULARITY_DESC", description="AniList MediaSort used for paging")

    # ── Year range bounds ─────────────────────────────────────────────
    MIN_YEAR: int = Field(default=1960, ge=1900, description="Earliest selectable start year")
    MAX_YEAR: int = Field(default=2025, le=2100, description="Latest selectable end year")

    # ── Logging ───────────────────────────────────────────────────────
    LOG_LEVEL: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    LOG_FORMAT: str = Field(default="json", description="Log output format ('json' for prod, 'console' for dev)")

    # ── Startup ───────────────────────────────────────────────────────
    STARTUP_CHECK_ENABLED: bool = Field(default=True, description="Ping AniList once at startup")

    # ── Validators ────────────────────────────────────────────────────

    @field_validator("SECRET_KEY")
    @classmethod
    def validate_secret_key(cls, v: str, info) -> str:
        """Refuse the default secret key in production."""
        env = info.data.get("FLASK_ENV", "development")
        if env == "production" and v == "change-me-in-production":
            raise ValueError(
                "SECRET_KEY must be changed from the default in production. "
                "Generate one with: python -c \"import secrets; print(secrets.token_hex(32))\""
            )
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate log level."""
        v = v.upper().strip()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}, got '{v}'")
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        v = v.lower().strip()
        if v not in ("json", "console"):
            raise ValueError("LOG_FORMAT must be 'json' or 'console'")
        return v

    @field_validator("SAMPLER_SORT")
    @classmethod
    def validate_sort(cls, v: str) -> str:
        """AniList enum values are upper snake case."""
        return v.upper().strip()

    @field_validator("ANILIST_API_URL")
    @classmethod
    def validate_urls(cls, v: str) -> str:
        """Ensure the endpoint URL doesn't have a trailing slash."""
        return v.rstrip("/")

    @model_validator(mode="after")
    def validate_year_bounds(self) -> "Settings":
        if self.MIN_YEAR > self.MAX_YEAR:
            raise ValueError("MIN_YEAR must be less than or equal to MAX_YEAR")
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton Settings instance.

    Uses `lru_cache` so the `.env` file is only read once.
    Call this everywhere instead of instantiating Settings directly.
    """
    return Settings()
