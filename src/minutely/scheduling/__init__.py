"""Scheduler package for minutely.

Quick Start::

    from minutely.jobs import JobRegistry, JobStore
    from minutely.scheduling import create_scheduler

    store = JobStore()
    registry = JobRegistry(store)
    scheduler = create_scheduler(store)
    scheduler.start()

    registry.create({"type": "daily", "hour": 14, "minute": 0})

Guardrails:
    ❌ Dispatching before the minute key is claimed in the store
    ✅ ``JobStore.claim()`` inside ``DueJobMatcher.scan()``
    ❌ Waiting on a worker from the scheduling thread
    ✅ ``WorkerDispatcher.dispatch()`` returns as soon as the process starts
    ❌ Constructing scheduler components individually
    ✅ ``create_scheduler(store)`` factory function
"""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from minutely.jobs.store import JobStore
from minutely.scheduling.aligner import MinuteAlignedBackend, seconds_until_next_minute
from minutely.scheduling.dispatcher import (
    DEFAULT_TASK,
    WorkerDispatcher,
    WorkerOutcome,
    WorkerResult,
    classify,
)
from minutely.scheduling.matcher import DueJobMatcher, day_of_week, is_due, minute_key
from minutely.scheduling.protocol import BackendHealth, SchedulerBackend
from minutely.scheduling.service import SchedulerHealth, SchedulerService, SchedulerStats

__all__ = [
    "SchedulerBackend",
    "BackendHealth",
    "MinuteAlignedBackend",
    "seconds_until_next_minute",
    "DueJobMatcher",
    "minute_key",
    "day_of_week",
    "is_due",
    "WorkerDispatcher",
    "WorkerOutcome",
    "WorkerResult",
    "classify",
    "DEFAULT_TASK",
    "SchedulerService",
    "SchedulerStats",
    "SchedulerHealth",
    "create_scheduler",
    "make_clock",
]


def make_clock(timezone: str | None = None):
    """Wall-clock source in ``timezone`` (IANA name) or local time when None."""
    if timezone is None:
        return datetime.now
    tz = ZoneInfo(timezone)
    return lambda: datetime.now(tz)


def create_scheduler(
    store: JobStore,
    *,
    task_path: str = DEFAULT_TASK,
    interval_seconds: float = 60.0,
    realign_every_tick: bool = False,
    timezone: str | None = None,
    start_method: str | None = None,
) -> SchedulerService:
    """Factory function to create a complete scheduler service.

    Args:
        store: Job store shared with the registry
        task_path: Dotted path of the task run for every due job
        interval_seconds: Tick period after the first aligned tick
        realign_every_tick: Re-align each wait to the wall-clock minute
        timezone: IANA timezone used for matching (None = local time)
        start_method: multiprocessing start method for workers

    Returns:
        Configured SchedulerService (not started)
    """
    clock = make_clock(timezone)
    backend = MinuteAlignedBackend(clock=clock, realign_every_tick=realign_every_tick)
    dispatcher = WorkerDispatcher(task_path, start_method=start_method)

    return SchedulerService(
        backend=backend,
        store=store,
        dispatcher=dispatcher,
        interval_seconds=interval_seconds,
        clock=clock,
    )
