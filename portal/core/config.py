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

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ up front
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    api_key_required: bool = Field(
        True,
        description="Whether mutating routes require an X-API-Key header",
    )
    api_keys: str | None = Field(
        None,
        description="Comma-separated list of valid API keys for authentication",
    )
    backend_mode: str = Field(
        "memory",
        description="Entity store backend: 'memory' or 'http'",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per client+route rate limiting",
    )
    rate_limit_window_ms: int = Field(
        60_000,
        description="Fixed window size in milliseconds",
        ge=1,
    )
    rate_limit_max_requests: int = Field(
        10,
        description="Maximum number of requests allowed per window (per client+route)",
        ge=1,
    )
    rate_limit_max_keys: int | None = Field(
        10_000,
        description="Upper bound on tracked client+route keys (None for unbounded)",
    )
    rate_limit_trust_proxy_headers: bool = Field(
        True,
        description="Use X-Forwarded-For / X-Real-IP to identify the client",
    )
    rate_limit_exempt_paths: str = Field(
        "/health,/docs,/redoc,/openapi.json",
        description="Comma-separated paths that bypass rate limiting",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class ServiceSettings(BaseSettings):
    """Endpoints of the external services this API fronts."""

    data_api_base_url: str = Field(
        "http://localhost:8000/api",
        description="Base URL of the remote data API used when backend_mode=http",
    )
    chat_service_url: str = Field(
        "http://localhost:8001",
        description="Base URL of the AI chat microservice",
    )
    request_timeout_seconds: float = Field(
        10.0,
        description="Timeout for data API requests in seconds",
    )
    chat_timeout_seconds: float = Field(
        15.0,
        description="Abort chat relay calls after this many seconds",
    )
    default_organization_id: str | None = Field(
        None,
        description="Organization used for chat requests that carry none",
    )

    model_config = SettingsConfigDict(
        env_prefix="SERVICES_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="'json' or 'plain'")
    output: str = Field("stdout", description="'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
    )
    backup_count: int = Field(5, description="Number of rotated files to keep")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to read and propagate the request correlation id",
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
    app: AppSettings = Field(default_factory=AppSettings)
    services: ServiceSettings = Field(default_factory=ServiceSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


def parse_csv(value: str | None) -> list[str]:
    """Split a comma-separated setting into trimmed, non-empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


settings = Settings()
