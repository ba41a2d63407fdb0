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

# Production injects via env vars only
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ first
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_store_settings() -> "StoreSettings":
    return StoreSettings()


def _build_app_settings() -> "AppSettings":
    return AppSettings()


def _build_mail_settings() -> "MailSettings":
    return MailSettings()


def _build_log_settings() -> "LogSettings":
    return LogSettings()


class StoreSettings(BaseSettings):
    """Key-value store configuration.

    An empty ``table_name`` disables rate limiting and submission storage
    entirely; every store-backed operation then returns its most permissive
    result.
    """

    backend: str = Field(
        "memory",
        description="Store backend: 'memory' (single process) or 'redis'",
    )
    table_name: str = Field(
        "",
        description="Logical table name; also used as the Redis key namespace",
    )
    redis_url: str = Field(
        "redis://localhost:6379/0",
        description="Redis connection URL (used when backend is 'redis')",
    )
    client_index_name: str = Field(
        "clientId-timestamp-index",
        description="Secondary index used for client-scoped submission queries",
    )

    model_config = SettingsConfigDict(
        env_prefix="STORE_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    api_key_required: bool = Field(
        True,
        description="Whether API key authentication is required",
    )
    api_keys: str | None = Field(
        None,
        description="Comma-separated list of valid API keys for authentication",
    )
    client_email_mappings: str | None = Field(
        None,
        description="Comma-separated clientId:recipient pairs (e.g. 'acme:owner@acme.io')",
    )

    ip_max_requests_per_hour: int = Field(
        10,
        description="Maximum form submissions accepted per source IP per window",
        ge=1,
    )
    ip_window_seconds: int = Field(
        3600,
        description="Sliding window length for the per-IP limit",
        ge=1,
    )
    email_max_per_day: int = Field(
        20,
        description="Maximum notification emails per client per window",
        ge=1,
    )
    email_window_seconds: int = Field(
        86400,
        description="Sliding window length for the per-client email limit",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )
    submission_query_max_limit: int = Field(
        100,
        description="Upper bound for the limit parameter of client submission queries",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class MailSettings(BaseSettings):
    """Outbound notification settings."""

    verified_sender: str = Field(
        "no-reply@localhost",
        description="Sender address used for notification emails",
    )
    subject_prefix: str = Field(
        "",
        description="Optional prefix prepended to every notification subject",
    )

    model_config = SettingsConfigDict(
        env_prefix="MAIL_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="'json' or 'plain'")
    output: str = Field("stdout", description="'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output is 'file'")
    max_bytes: int = Field(0, description="Rotate log file at this size (0 disables rotation)")
    backup_count: int = Field(5, description="Number of rotated files to keep")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to read and propagate the correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are malformed.
    """

    app_env: str = APP_ENV
    store: StoreSettings = Field(default_factory=_build_store_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)
    mail: MailSettings = Field(default_factory=_build_mail_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Nested settings are created via default_factory so env loading works.
settings = Settings()
