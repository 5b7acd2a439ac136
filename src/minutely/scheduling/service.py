"""Scheduler service - main orchestrator.

Combines backend (timing), store (data), matcher (decision) and
dispatcher (execution) into one scheduling system.

┌──────────────────────────────────────────────────────────────────────────────┐
│  SCHEDULER SERVICE                                                            │
│                                                                               │
│   ┌─────────────────┐  ┌─────────────────┐  ┌─────────────────┐              │
│   │  Backend        │  │  JobStore       │  │  Dispatcher     │              │
│   │  (timing)       │  │  (data)         │  │  (execution)    │              │
│   └────────┬────────┘  └────────┬────────┘  └────────┬────────┘              │
│            ▼                    ▼                    ▼                        │
│   ┌────────────────────────────────────────────────────────────┐             │
│   │  tick(now)                                                 │             │
│   │    matcher.scan(now)                                       │             │
│   │      ├── skip jobs already claimed for this minute         │             │
│   │      ├── claim minute key for due jobs                     │             │
│   │      └── dispatcher.dispatch(job_id)   (non-blocking)      │             │
│   └────────────────────────────────────────────────────────────┘             │
│                                                                               │
│   Outcomes flow back from watcher threads into stats only.                    │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any

from minutely.core.logging import get_logger
from minutely.jobs.store import JobStore
from minutely.scheduling.dispatcher import WorkerDispatcher, WorkerResult
from minutely.scheduling.matcher import DueJobMatcher
from minutely.scheduling.protocol import SchedulerBackend

logger = get_logger(__name__)


@dataclass
class SchedulerStats:
    """Counters for the scheduler service."""

    tick_count: int = 0
    jobs_dispatched: int = 0
    jobs_succeeded: int = 0
    jobs_failed: int = 0
    last_tick: datetime | None = None
    last_error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "tick_count": self.tick_count,
            "jobs_dispatched": self.jobs_dispatched,
            "jobs_succeeded": self.jobs_succeeded,
            "jobs_failed": self.jobs_failed,
            "last_tick": self.last_tick.isoformat() if self.last_tick else None,
            "last_error": self.last_error,
        }


@dataclass
class SchedulerHealth:
    """Health status for the scheduler service."""

    healthy: bool
    backend: dict[str, Any]
    jobs: int = 0
    active_workers: int = 0
    stats: SchedulerStats = field(default_factory=SchedulerStats)

    def to_dict(self) -> dict[str, Any]:
        return {
            "healthy": self.healthy,
            "backend": self.backend,
            "jobs": self.jobs,
            "active_workers": self.active_workers,
            "stats": self.stats.to_dict(),
        }


class SchedulerService:
    """Minute scheduler: backend ticks drive the matcher, matches go to workers.

    Example:
        >>> store = JobStore()
        >>> service = SchedulerService(
        ...     backend=MinuteAlignedBackend(),
        ...     store=store,
        ...     dispatcher=WorkerDispatcher(),
        ... )
        >>> service.start()
        >>> # Later...
        >>> service.stop()
    """

    def __init__(
        self,
        backend: SchedulerBackend,
        store: JobStore,
        dispatcher: WorkerDispatcher,
        interval_seconds: float = 60.0,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize scheduler service.

        Args:
            backend: Timing backend.
            store: Job store shared with the registry.
            dispatcher: Worker dispatcher.
            interval_seconds: Tick period after the first aligned tick.
            clock: Wall-clock source for matching (default: ``datetime.now``).
        """
        self.backend = backend
        self.store = store
        self.dispatcher = dispatcher
        self.interval = interval_seconds
        self._clock = clock or datetime.now

        self.matcher = DueJobMatcher(store, dispatcher.dispatch)
        dispatcher.add_listener(self._record_outcome)

        self._stats = SchedulerStats()
        self._stats_lock = threading.Lock()
        self._running = False

    # === Lifecycle ===

    def start(self) -> None:
        if self._running:
            logger.warning("scheduler_already_running")
            return

        logger.info("scheduler_starting", backend=self.backend.name, interval_seconds=self.interval)
        self.backend.start(self.tick, self.interval)
        self._running = True

    def stop(self, drain_timeout: float | None = 5.0) -> None:
        """Stop ticking, then wait up to ``drain_timeout`` for in-flight workers."""
        if not self._running:
            return

        logger.info("scheduler_stopping")
        self.backend.stop()
        self._running = False
        if not self.dispatcher.wait_idle(drain_timeout):
            logger.warning("scheduler_workers_still_running", active=self.dispatcher.active_count)
        logger.info("scheduler_stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    # === Tick Processing ===

    def tick(self, now: datetime | None = None) -> list[int]:
        """Run one scan. Never raises.

        Returns:
            Ids of the jobs dispatched by this tick.
        """
        now = now or self._clock()
        with self._stats_lock:
            self._stats.tick_count += 1
            self._stats.last_tick = datetime.now(UTC)

        try:
            dispatched = self.matcher.scan(now)
        except Exception as e:
            with self._stats_lock:
                self._stats.last_error = str(e)
            logger.exception("tick_failed", error=str(e))
            return []

        if dispatched:
            with self._stats_lock:
                self._stats.jobs_dispatched += len(dispatched)
            logger.info("tick_dispatched", count=len(dispatched), job_ids=dispatched)
        else:
            logger.debug("no_jobs_due")
        return dispatched

    def _record_outcome(self, result: WorkerResult) -> None:
        with self._stats_lock:
            if result.ok:
                self._stats.jobs_succeeded += 1
            else:
                self._stats.jobs_failed += 1
                self._stats.last_error = result.error

    # === Health & Stats ===

    def health(self) -> SchedulerHealth:
        backend_health = self.backend.health()
        return SchedulerHealth(
            healthy=self._running and backend_health.get("healthy", False),
            backend=backend_health,
            jobs=len(self.store),
            active_workers=self.dispatcher.active_count,
            stats=self.get_stats(),
        )

    def get_stats(self) -> SchedulerStats:
        """A copy of the current statistics."""
        with self._stats_lock:
            return replace(self._stats)

    def reset_stats(self) -> None:
        with self._stats_lock:
            self._stats = SchedulerStats()
