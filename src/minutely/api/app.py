"""
FastAPI application factory.

``create_app()`` wires middleware, routers, error handlers, the job
store and the scheduler into a single ``FastAPI`` instance.

The app owns one :class:`~minutely.jobs.store.JobStore`; the registry
(HTTP side) and the scheduler service (tick side) share it.  The
lifespan starts the scheduler after startup and stops it, draining
in-flight workers, on shutdown.

Tags:
    minutely, api, app-factory, composition-root, FastAPI
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from minutely.api.deps import get_settings
from minutely.api.middleware.errors import (
    minutely_error_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from minutely.api.middleware.request_id import RequestIDMiddleware
from minutely.api.middleware.timing import TimingMiddleware
from minutely.api.settings import MinutelyAPISettings
from minutely.core.errors import MinutelyError
from minutely.core.logging import get_logger
from minutely.jobs.registry import JobRegistry
from minutely.jobs.store import JobStore
from minutely.scheduling import create_scheduler


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - start and stop the scheduler."""

    log = get_logger("minutely.api")
    settings: MinutelyAPISettings = app.state.settings
    scheduler = app.state.scheduler

    log.info("api_starting", version=app.version, scheduler_enabled=settings.scheduler_enabled)
    if settings.scheduler_enabled:
        scheduler.start()

    yield

    log.info("api_shutting_down")
    scheduler.stop(drain_timeout=settings.shutdown_drain_seconds)


def create_app(
    *,
    settings: MinutelyAPISettings | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : MinutelyAPISettings | None
        Override settings (useful for testing).  When ``None`` the cached
        singleton from :func:`get_settings` is used.
    """

    settings = settings or get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
    )

    store = JobStore()
    app.state.settings = settings
    app.state.store = store
    app.state.registry = JobRegistry(store)
    app.state.scheduler = create_scheduler(
        store,
        task_path=settings.job_task,
        interval_seconds=settings.tick_interval_seconds,
        realign_every_tick=settings.realign_every_tick,
        timezone=settings.timezone,
        start_method=settings.worker_start_method,
    )

    app.dependency_overrides[get_settings] = lambda: settings

    # ── Middleware (outermost → innermost) ────────────────────────────
    app.add_middleware(TimingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Exception handlers ───────────────────────────────────────────
    app.add_exception_handler(MinutelyError, minutely_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # ── Routers ──────────────────────────────────────────────────────
    from minutely.api.routers import health, jobs

    app.include_router(health.router, tags=["health"])
    app.include_router(jobs.router, prefix=settings.api_prefix, tags=["jobs"])

    return app
