"""
FastAPI dependency injection - shared singletons.

Usage in routers::

    from minutely.api.deps import Registry, Scheduler

    @router.get("/jobs")
    def list_jobs(registry: Registry):
        ...

The registry and scheduler live on ``app.state`` (created by
:func:`minutely.api.app.create_app`), so every request of one app sees
the same store.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from minutely.api.settings import MinutelyAPISettings, load_api_settings
from minutely.jobs.registry import JobRegistry
from minutely.scheduling.service import SchedulerService


@lru_cache(maxsize=1)
def get_settings() -> MinutelyAPISettings:
    """Cached settings - loaded once per process."""
    return load_api_settings()


def get_registry(request: Request) -> JobRegistry:
    return request.app.state.registry


def get_scheduler(request: Request) -> SchedulerService:
    return request.app.state.scheduler


Settings = Annotated[MinutelyAPISettings, Depends(get_settings)]
Registry = Annotated[JobRegistry, Depends(get_registry)]
Scheduler = Annotated[SchedulerService, Depends(get_scheduler)]
