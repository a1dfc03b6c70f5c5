"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file

Settings are grouped by concern (app, redis, rate limit, auth, log). The
application factory receives a ``Settings`` instance explicitly so tests can
build isolated apps without touching the module-level ``settings``.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_ENV = os.getenv("APP_ENV", "development")

PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ first.
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_app_settings() -> "AppSettings":
    return AppSettings()  # type: ignore[call-arg]


def _build_redis_settings() -> "RedisSettings":
    return RedisSettings()  # type: ignore[call-arg]


def _build_rate_limit_settings() -> "RateLimitSettings":
    return RateLimitSettings()  # type: ignore[call-arg]


def _build_auth_settings() -> "AuthSettings":
    """Build auth settings from environment.

    ``jwt_secret`` is required; static type checkers treat it as a required
    constructor argument, which is not how BaseSettings is populated.
    """

    return AuthSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    store_backend: str = Field(
        "redis",
        description="Counter store backend: 'redis' or 'memory' (single process only)",
    )
    host: str = Field("0.0.0.0", description="Bind address for the bundled server")
    port: int = Field(8080, description="Listen port for the bundled server")

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class RedisSettings(BaseSettings):
    """Connection parameters for the shared counter store."""

    host: str = Field("localhost", description="Redis host")
    port: int = Field(6379, description="Redis port")
    password: str | None = Field(None, description="Redis password")
    db: int = Field(0, description="Redis logical database index")
    prefix: str = Field(
        "",
        description="Namespace prepended to every counter key",
    )
    socket_timeout_seconds: float = Field(
        5.0,
        description="Socket connect/read timeout for Redis calls",
    )

    model_config = SettingsConfigDict(
        env_prefix="REDIS_",
        case_sensitive=False,
    )


class RateLimitSettings(BaseSettings):
    """Quota applied to address-based identities and interceptor options.

    Credential-based identities carry their own quota inside the token.
    Non-positive values are accepted here and turn into a permanent deny in
    the admission engine.
    """

    enabled: bool = Field(
        True,
        description="Enable request admission checks",
    )
    ip_max_requests: int = Field(
        10,
        description="Maximum requests per window for a network address",
    )
    ip_block_duration: int = Field(
        60,
        description="Window length in seconds for a network address",
    )
    credential_header: str = Field(
        "API_KEY",
        description="Request header carrying the signed quota credential",
    )
    deny_anonymous: bool = Field(
        True,
        description="Deny requests with neither an address nor a credential",
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
    )


class AuthSettings(BaseSettings):
    """Credential signing configuration."""

    jwt_secret: str = Field(
        ...,
        description="Shared secret used to sign and verify quota credentials",
    )
    jwt_algorithm: str = Field(
        "HS256",
        description="Symmetric signing algorithm for quota credentials",
    )
    token_lifetime_minutes: int = Field(
        9999,
        description="Lifetime of credentials issued by the token endpoint",
        ge=1,
    )
    default_subject: str = Field(
        "_generic",
        description="Subject embedded in issued credentials when none is given",
    )

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: 'json' or 'plain'")
    output: str = Field("stdout", description="Log destination: 'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output is 'file'")
    max_bytes: int = Field(
        10_485_760,
        description="Rotate the log file after this many bytes (0 disables rotation)",
    )
    backup_count: int = Field(5, description="Number of rotated log files to keep")
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
    Raises validation errors on startup if required settings are missing.
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=_build_app_settings)
    redis: RedisSettings = Field(default_factory=_build_redis_settings)
    rate_limit: RateLimitSettings = Field(default_factory=_build_rate_limit_settings)
    auth: AuthSettings = Field(default_factory=_build_auth_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


settings = Settings()
