"""Minute-aligned threading backend.

┌──────────────────────────────────────────────────────────────────────────────┐
│  MINUTE-ALIGNED BACKEND                                                       │
│                                                                               │
│   start()                                                                     │
│      │                                                                        │
│      ▼                                                                        │
│   ┌──────────────────────────────────────────────────────────────────┐       │
│   │  Daemon Thread                                                   │       │
│   │                                                                  │       │
│   │   wait(seconds_until_next_minute(now))      ◄── alignment        │       │
│   │   deadline = monotonic()                                         │       │
│   │   loop:                                                          │       │
│   │       tick_callback()                       ◄── synchronous      │       │
│   │       deadline += interval                                       │       │
│   │       skip deadlines already in the past   ◄── coalesce stalls  │       │
│   │       if stop_event.wait(deadline - monotonic()): break          │       │
│   └──────────────────────────────────────────────────────────────────┘       │
│                                                                               │
│   stop()  →  stop_event.set(); thread.join(timeout=5.0)                      │
│                                                                               │
│  Deadlines are measured on the monotonic clock, so time spent inside a tick  │
│  does not push later ticks back.  With ``realign_every_tick`` every wait is  │
│  recomputed from the wall clock instead, which also follows clock changes.   │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from minutely.core.logging import get_logger
from minutely.scheduling.protocol import BackendHealth, TickCallback

logger = get_logger(__name__)


def seconds_until_next_minute(now: datetime) -> float:
    """Delay from ``now`` to the next wall-clock minute boundary.

    Exactly on a boundary the answer is a full minute, never zero.
    """
    return 60 - now.second - now.microsecond / 1_000_000


class MinuteAlignedBackend:
    """Tick once per minute, aligned to the wall clock.

    Example:
        >>> backend = MinuteAlignedBackend()
        >>> backend.start(lambda: print("tick"), interval_seconds=60.0)
        >>> # ... later ...
        >>> backend.stop()
    """

    name = "minute-aligned"

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] | None = None,
        realign_every_tick: bool = False,
    ) -> None:
        """Initialize the backend.

        Args:
            clock: Wall-clock source used for alignment (default: ``datetime.now``).
            realign_every_tick: Recompute each wait from the wall clock.
        """
        self._clock = clock or datetime.now
        self._realign = realign_every_tick
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self._tick_count = 0
        self._missed_ticks = 0
        self._last_tick: datetime | None = None
        self._interval: float = 60.0
        self._started = False

    def start(
        self,
        tick_callback: TickCallback,
        interval_seconds: float = 60.0,
    ) -> None:
        if self._started:
            logger.warning("backend_already_started", backend=self.name)
            return
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self._interval = interval_seconds
        self._stop_event.clear()

        self._thread = threading.Thread(
            target=self._loop,
            args=(tick_callback, interval_seconds),
            daemon=True,
            name="minutely-scheduler",
        )
        self._thread.start()
        self._started = True

    def _loop(self, tick_callback: TickCallback, interval_seconds: float) -> None:
        delay = seconds_until_next_minute(self._clock())
        logger.info(
            "backend_started",
            backend=self.name,
            first_tick_in=round(delay, 3),
            interval_seconds=interval_seconds,
        )
        if self._stop_event.wait(delay):
            logger.info("backend_stopped", backend=self.name)
            return

        deadline = time.monotonic()
        while True:
            self._run_tick(tick_callback)

            if self._realign:
                delay = seconds_until_next_minute(self._clock())
            else:
                deadline += interval_seconds
                now = time.monotonic()
                missed = 0
                while deadline <= now:
                    deadline += interval_seconds
                    missed += 1
                if missed:
                    with self._lock:
                        self._missed_ticks += missed
                    logger.warning("tick_missed", backend=self.name, missed=missed)
                delay = deadline - now

            if self._stop_event.wait(delay):
                break

        logger.info("backend_stopped", backend=self.name)

    def _run_tick(self, tick_callback: TickCallback) -> None:
        with self._lock:
            self._tick_count += 1
            self._last_tick = datetime.now(UTC)
        try:
            tick_callback()
        except Exception as e:
            logger.exception("tick_failed", backend=self.name, error=str(e))

    def stop(self) -> None:
        """Stop the loop. Waits up to 5 seconds for the current tick."""
        if not self._started:
            return

        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=5.0)
            if self._thread.is_alive():
                logger.warning("backend_thread_still_alive", backend=self.name)

        self._started = False

    def health(self) -> dict[str, Any]:
        return self.get_health().to_dict()

    def get_health(self) -> BackendHealth:
        """Return structured health status."""
        with self._lock:
            return BackendHealth(
                healthy=self.is_running,
                backend=self.name,
                tick_count=self._tick_count,
                last_tick=self._last_tick,
                missed_ticks=self._missed_ticks,
                extra={
                    "interval_seconds": self._interval,
                    "realign_every_tick": self._realign,
                },
            )

    @property
    def is_running(self) -> bool:
        return self._started and self._thread is not None and self._thread.is_alive()

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def missed_ticks(self) -> int:
        return self._missed_ticks

    @property
    def last_tick(self) -> datetime | None:
        return self._last_tick
