"""Shared base settings for minutely.

Every minutely entry point (API server, CLI) shares common configuration
needs: bind address, debug mode, log level and log format.
``MinutelyBaseSettings`` declares them once; ``minutely.api.settings``
adds the scheduler and HTTP knobs.

Examples:
    >>> from minutely.core.settings import MinutelyBaseSettings
    >>> MinutelyBaseSettings(log_level="DEBUG").log_level
    'DEBUG'

Tags:
    settings, configuration, pydantic, environment, minutely
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MinutelyBaseSettings(BaseSettings):
    """Common settings shared across minutely entry points.

    Fields
    ──────
    host         : Bind address for the HTTP transport
    port         : Bind port for the HTTP transport
    debug        : Enable debug mode (error details in 500 responses)
    log_level    : structlog log level
    json_logs    : JSON log lines (True), console (False), auto-detect (None)
    """

    model_config = SettingsConfigDict(
        env_prefix="MINUTELY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Network ──────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 3000

    # ── Observability ────────────────────────────────────────────
    debug: bool = False
    log_level: str = "INFO"
    json_logs: bool | None = Field(default=None, description="None = JSON unless stdout is a tty")
