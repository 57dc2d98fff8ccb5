"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file

The catalog manager and the rate limiter never read these settings
themselves; the app factory and the HTTP dependencies pass plain values in.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

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

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ first.
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_app_settings() -> "AppSettings":
    """Build app settings from environment.

    BaseSettings fields are populated from environment variables, which
    static type checkers don't know about, hence the type ignore.
    """

    return AppSettings()  # type: ignore[call-arg]


def _build_catalog_settings() -> "CatalogSettings":
    return CatalogSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


def _build_server_settings() -> "ServerSettings":
    return ServerSettings()  # type: ignore[call-arg]


class ServerSettings(BaseSettings):
    """Bind address for the bundled uvicorn entry point."""

    host: str = Field("127.0.0.1", description="Interface to bind")
    port: int = Field(8080, description="TCP port to bind", ge=1, le=65535)

    model_config = SettingsConfigDict(
        env_prefix="SERVER_",
        case_sensitive=False,
    )


class CatalogSettings(BaseSettings):
    """Where the desktop and mobile catalogs are read from.

    When a path is left unset, the JSON file packaged with the service is used.
    """

    desktop_file: str | None = Field(
        None,
        description="Path to a JSON list of {ua, pct} records for desktop agents",
    )
    mobile_file: str | None = Field(
        None,
        description="Path to a JSON list of {ua, pct} records for mobile agents",
    )

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable rate limiting per client IP",
    )
    rate_limit_requests: int = Field(
        100,
        description="Maximum number of requests allowed per window (per client)",
        ge=1,
    )
    rate_limit_window_seconds: float = Field(
        60.0,
        description="Rate limit window size in seconds",
        gt=0,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )
    rate_limit_max_keys: int | None = Field(
        None,
        description="Bound on tracked client keys (LRU eviction); unbounded when unset",
        ge=1,
    )

    audit_backend: Literal["log", "memory"] = Field(
        "log",
        description="Where selection records go: structured logs or an in-memory ring buffer",
    )
    audit_max_records: int = Field(
        10000,
        description="Capacity of the in-memory audit ring buffer",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: Literal["json", "plain"] = Field("json", description="Log line format")
    output: Literal["stdout", "file"] = Field("stdout", description="Log destination")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file at this size (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to read and echo the request correlation id",
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
    app: AppSettings = Field(default_factory=_build_app_settings)
    catalog: CatalogSettings = Field(default_factory=_build_catalog_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)
    server: ServerSettings = Field(default_factory=_build_server_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
settings = Settings()
