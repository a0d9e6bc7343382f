"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production injects via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ first.
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=False)


class AcuitySettings(BaseSettings):
    """Acuity Scheduling API credentials and endpoints.

    Credentials are optional at startup. When either is missing the site
    serves static fallback content instead of calling the API.
    """

    user_id: str | None = Field(
        None,
        description="Acuity user ID used as the Basic auth username",
    )
    api_key: str | None = Field(
        None,
        description="Acuity API key used as the Basic auth password",
    )
    base_url: str = Field(
        "https://acuityscheduling.com/api/v1",
        description="Acuity REST API base URL",
    )
    timeout_seconds: float = Field(
        8.0,
        description="Per-request timeout in seconds",
        gt=0,
    )
    owner_id: str = Field(
        "38274584",
        description="Acuity account owner id used in public booking links",
    )
    app_origin: str = Field(
        "https://app.acuityscheduling.com",
        description="Origin of the hosted Acuity scheduling pages",
    )

    model_config = SettingsConfigDict(
        env_prefix="ACUITY_",
        case_sensitive=False,
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.user_id and self.api_key)


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    cors_allow_origin: str = Field(
        "https://vahair.studio",
        description="Origin allowed to call the public API routes",
    )
    salon_time_zone: str = Field(
        "America/New_York",
        description="IANA time zone used when rendering appointment times",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-client rate limiting on API routes",
    )
    rate_limit_requests: int = Field(
        120,
        description="Maximum number of requests allowed per window (per route and client)",
        ge=1,
    )
    rate_limit_window_seconds: int = Field(
        60,
        description="Rate limit window size in seconds",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log destination: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        0,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated log files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to propagate the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    """

    app_env: str = APP_ENV
    acuity: AcuitySettings = Field(default_factory=AcuitySettings)
    app: AppSettings = Field(default_factory=AppSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
settings = Settings()
