"""Due-job matching.

On each tick the matcher walks the store in insertion order and, for
every job whose rule matches the current wall-clock minute, claims the
minute key in the store before handing the job id to the dispatcher.
Claiming first means a second scan in the same minute (a realigned
tick, a manual tick, a slow dispatch) never dispatches the job again.

    job.last_run_key == minute_key ? ── yes ──► skip
            │ no
    is_due(rule, now) ? ─────────────── no ───► skip
            │ yes
    store.claim(job.id, minute_key) ─── lost ─► skip
            │ won
    dispatch(job.id)
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from minutely.core.logging import get_logger
from minutely.jobs.models import DailyRule, HourlyRule, Recurrence, WeeklyRule
from minutely.jobs.store import JobStore

logger = get_logger(__name__)

MINUTE_KEY_FORMAT = "%Y-%m-%dT%H:%M"


def minute_key(now: datetime) -> str:
    """Minute-resolution UTC key, e.g. ``"2026-10-19T14:05"``.

    Naive datetimes are taken as local time.
    """
    return now.astimezone(UTC).strftime(MINUTE_KEY_FORMAT)


def day_of_week(now: datetime) -> int:
    """Day of week with 0 = Sunday ... 6 = Saturday."""
    return now.isoweekday() % 7


def is_due(rule: Recurrence, now: datetime) -> bool:
    """Whether ``rule`` matches the wall-clock minute of ``now``."""
    match rule:
        case HourlyRule(minute=minute):
            return now.minute == minute
        case DailyRule(hour=hour, minute=minute):
            return now.hour == hour and now.minute == minute
        case WeeklyRule(day_of_week=dow, hour=hour, minute=minute):
            return day_of_week(now) == dow and now.hour == hour and now.minute == minute
    raise TypeError(f"Unknown recurrence rule: {rule!r}")


class DueJobMatcher:
    """Decide which jobs are due and hand them to ``dispatch``."""

    def __init__(self, store: JobStore, dispatch: Callable[[int], object]) -> None:
        self.store = store
        self._dispatch = dispatch

    def scan(self, now: datetime) -> list[int]:
        """Dispatch every job due at ``now``. Returns the dispatched ids in store order."""
        key = minute_key(now)
        dispatched: list[int] = []

        for job in self.store.snapshot():
            if job.last_run_key == key:
                continue
            if not is_due(job.rule, now):
                continue
            if not self.store.claim(job.id, key):
                continue

            logger.info("job_due", job_id=job.id, type=job.type.value, minute_key=key)
            try:
                self._dispatch(job.id)
            except Exception as e:
                # The minute stays claimed: the job waits for its next occurrence.
                logger.exception("job_dispatch_failed", job_id=job.id, error=str(e))
                continue
            dispatched.append(job.id)

        return dispatched
