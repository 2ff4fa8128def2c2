"""Settings for the Sole Design API, grouped by concern.

Each group reads its own environment prefix (``LOG_``, ``APP_``, ``AUTH_``,
``DB_``, ``IMAGE_``). ``APP_ENV`` selects an optional ``.env.<APP_ENV>`` file
at the project root whose values are exported before the groups are built;
real environment variables set by the deployment win only when no such file
exists.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

KNOWN_ENVIRONMENTS = ("development", "testing", "staging", "production")

APP_ENV = os.getenv("APP_ENV", "development")

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _env_file_for(environment: str) -> Path | None:
    name = environment if environment in KNOWN_ENVIRONMENTS else "development"
    path = PROJECT_ROOT / f".env.{name}"
    return path if path.is_file() else None


_env_file = _env_file_for(APP_ENV)

# Nested settings groups don't share an env_file, so export it once up front
if _env_file is not None:
    load_dotenv(_env_file, override=True)


DEFAULT_JWT_SECRET = "change-me-in-production"


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log output: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(10_485_760, description="Rotate log file after N bytes (0 disables rotation)")
    backup_count: int = Field(5, description="Rotated log files to keep")
    request_id_header: str = Field("X-Request-ID", description="Header carrying the correlation id")
    slow_request_ms: float = Field(1000.0, description="Requests slower than this are logged as warnings")

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    cors_origins: str = Field(
        "http://localhost:4200",
        description="Comma-separated list of origins allowed by CORS (Angular dev server by default)",
    )
    request_timeout_ms: int = Field(
        30_000,
        description="Requests running longer than this get a 504 (0 disables the timeout)",
        ge=0,
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-client request rate limiting",
    )
    rate_limit_max_requests: int = Field(
        10,
        description="Maximum number of requests allowed per window (per client)",
        ge=1,
    )
    rate_limit_window_ms: int = Field(
        60_000,
        description="Rate limit window length in milliseconds",
        ge=1,
    )
    rate_limit_max_entries: int = Field(
        10_000,
        description="Maximum number of tracked clients before least-recently-used eviction",
        ge=1,
    )
    rate_limit_sweep_interval_ms: int = Field(
        60_000,
        description="Minimum interval between sweeps of expired rate limit entries",
        ge=0,
    )
    rate_limit_trust_forwarded_for: bool = Field(
        False,
        description="Use the first X-Forwarded-For hop as the client address (only behind a trusted proxy)",
    )
    rate_limit_exempt_paths: str = Field(
        "/health",
        description="Comma-separated path prefixes that bypass rate limiting",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class AuthSettings(BaseSettings):
    """JWT and password hashing configuration."""

    jwt_secret: str = Field(
        DEFAULT_JWT_SECRET,
        description="Secret used to sign access tokens",
    )
    jwt_algorithm: str = Field("HS256", description="JWT signing algorithm")
    jwt_expire_minutes: int = Field(
        60 * 24 * 7,
        description="Access token lifetime in minutes",
        ge=1,
    )
    bcrypt_rounds: int = Field(
        10,
        description="bcrypt cost factor",
        ge=4,
        le=31,
    )

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        case_sensitive=False,
    )


class DatabaseSettings(BaseSettings):
    """Relational store configuration."""

    url: str = Field(
        "sqlite:///./sole.db",
        description="SQLAlchemy database URL",
    )
    echo: bool = Field(False, description="Log emitted SQL")

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        case_sensitive=False,
    )


class ImageSettings(BaseSettings):
    """Image generation provider configuration.

    Provider-specific requirements are validated in the adapter factory.
    """

    provider: str = Field(
        "stable_diffusion",
        description="Image provider name (stable_diffusion, openai)",
    )
    base_url: str | None = Field(
        None,
        description="Provider endpoint (required for stable_diffusion)",
    )
    api_key: str | None = Field(
        None,
        description="Provider API key (required for openai)",
    )
    model: str = Field(
        "dall-e-3",
        description="Model name for providers that support several",
    )
    timeout_seconds: float = Field(60.0, description="Request timeout in seconds")
    steps: int = Field(50, description="Diffusion steps", ge=1)
    width: int = Field(512, description="Image width in pixels", ge=64)
    height: int = Field(512, description="Image height in pixels", ge=64)
    guidance_scale: float = Field(7.5, description="Classifier-free guidance scale")

    model_config = SettingsConfigDict(
        env_prefix="IMAGE_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if a setting is malformed.
    """

    app_env: str = APP_ENV
    log: LogSettings = Field(default_factory=LogSettings)
    app: AppSettings = Field(default_factory=AppSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    db: DatabaseSettings = Field(default_factory=DatabaseSettings)
    image: ImageSettings = Field(default_factory=ImageSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


def split_csv(value: str | None) -> list[str]:
    """Split a comma-separated setting into trimmed, non-empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


# Global settings instance - composed from domain-specific settings
settings = Settings()
