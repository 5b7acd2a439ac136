"""
API and scheduler settings.

Extends :class:`~minutely.core.settings.MinutelyBaseSettings` with the
HTTP transport and scheduling knobs.

All values can be overridden via environment variables prefixed with
``MINUTELY_`` (``MINUTELY_TICK_INTERVAL_SECONDS``, ``MINUTELY_TIMEZONE``...).
"""

from __future__ import annotations

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, ValidationError, field_validator

from minutely import __version__
from minutely.core.errors import ConfigError
from minutely.core.settings import MinutelyBaseSettings
from minutely.scheduling.dispatcher import DEFAULT_TASK


class MinutelyAPISettings(MinutelyBaseSettings):
    """Settings for the minutely REST API and its scheduler.

    Order of precedence (highest → lowest):
        1. Environment variables (``MINUTELY_PORT``, etc.)
        2. ``.env`` file
        3. Defaults below
    """

    # ── API ──────────────────────────────────────────────────────────────
    api_prefix: str = Field(default="", description="URL prefix for job endpoints")
    api_title: str = Field(default="minutely API", description="OpenAPI title")
    api_version: str = Field(default=__version__, description="OpenAPI version string")

    # ── Scheduler ────────────────────────────────────────────────────────
    scheduler_enabled: bool = Field(default=True, description="Run the scheduler loop with the API")
    tick_interval_seconds: float = Field(default=60.0, gt=0, description="Tick period after alignment")
    realign_every_tick: bool = Field(default=False, description="Re-align every tick to the wall-clock minute")
    timezone: str | None = Field(default=None, description="IANA timezone for matching (None = local)")

    # ── Workers ──────────────────────────────────────────────────────────
    job_task: str = Field(default=DEFAULT_TASK, description="Dotted path of the task run for each job")
    worker_start_method: str | None = Field(
        default="spawn",
        description="multiprocessing start method (spawn, fork, forkserver)",
    )
    shutdown_drain_seconds: float = Field(default=5.0, ge=0, description="Wait for workers on shutdown")

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str | None) -> str | None:
        if value is None:
            return value
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown timezone: {value!r}") from e
        return value

    @field_validator("job_task")
    @classmethod
    def _dotted_path(cls, value: str) -> str:
        if "." not in value:
            raise ValueError("job_task must be a dotted path like 'package.module.function'")
        return value


def load_api_settings(**overrides) -> MinutelyAPISettings:
    """Build settings from the environment, raising :class:`ConfigError` when invalid."""
    try:
        return MinutelyAPISettings(**overrides)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ConfigError(f"invalid settings: {fields}", context={"errors": e.error_count()}, cause=e) from e
