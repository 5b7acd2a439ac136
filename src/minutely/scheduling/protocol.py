"""Scheduler backend protocol.

┌──────────────────────────────────────────────────────────────────────────────┐
│  SCHEDULER BACKEND PROTOCOL                                                   │
│                                                                               │
│  Backends control WHEN ticks happen; SchedulerService controls WHAT happens  │
│  on each tick.                                                                │
│                                                                               │
│   ┌──────────────────────┐     tick()     ┌──────────────────────────┐       │
│   │ MinuteAlignedBackend │ ─────────────► │ SchedulerService         │       │
│   │ (wall-clock aligned) │                │  - scan store            │       │
│   └──────────────────────┘                │  - claim minute key      │       │
│                                           │  - dispatch to worker    │       │
│                                           └──────────────────────────┘       │
│                                                                               │
│  Ticks are synchronous: the backend never starts a tick before the previous  │
│  one has returned.  Dispatch inside a tick is non-blocking.                  │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

TickCallback = Callable[[], None]


@runtime_checkable
class SchedulerBackend(Protocol):
    """Protocol for pluggable scheduler timing backends.

    A backend is responsible ONLY for timing - calling the tick callback
    at the right moments. All schedule evaluation lives in SchedulerService.
    """

    name: str

    def start(
        self,
        tick_callback: TickCallback,
        interval_seconds: float = 60.0,
    ) -> None:
        """Start the scheduler loop.

        Args:
            tick_callback: Called once per tick on the backend's thread.
            interval_seconds: Period between ticks after the first one.
        """
        ...

    def stop(self) -> None:
        """Stop the scheduler loop, waiting for the current tick to finish."""
        ...

    def health(self) -> dict[str, Any]:
        """Return backend health status.

        Returns:
            dict with at least:
                - healthy: bool
                - backend: str
                - tick_count: int
                - last_tick: str | None (ISO timestamp)
        """
        ...


@dataclass
class BackendHealth:
    """Structured backend health response."""

    healthy: bool
    backend: str
    tick_count: int = 0
    last_tick: datetime | None = None
    missed_ticks: int = 0
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "healthy": self.healthy,
            "backend": self.backend,
            "tick_count": self.tick_count,
            "last_tick": self.last_tick.isoformat() if self.last_tick else None,
            "missed_ticks": self.missed_ticks,
            **self.extra,
        }
