"""Pytest fixtures for scheduling tests."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import pytest

from minutely.scheduling.dispatcher import WorkerResult


class RecordingDispatcher:
    """Stands in for WorkerDispatcher: records job ids, never spawns."""

    name = "recording"

    def __init__(self) -> None:
        self.dispatched: list[int] = []
        self.listeners: list = []
        self.fail_for: set[int] = set()

    def add_listener(self, listener) -> None:
        self.listeners.append(listener)

    def dispatch(self, job_id: int) -> None:
        if job_id in self.fail_for:
            raise OSError(f"cannot spawn worker for {job_id}")
        self.dispatched.append(job_id)

    def report(self, result: WorkerResult) -> None:
        for listener in self.listeners:
            listener(result)

    def wait_idle(self, timeout: float | None = None) -> bool:
        return True

    @property
    def active_count(self) -> int:
        return 0


class ManualBackend:
    """Backend that never ticks on its own."""

    name = "manual"

    def __init__(self) -> None:
        self.started = False
        self.callback = None
        self.interval: float | None = None

    def start(self, tick_callback, interval_seconds: float = 60.0) -> None:
        self.started = True
        self.callback = tick_callback
        self.interval = interval_seconds

    def stop(self) -> None:
        self.started = False

    def health(self) -> dict[str, Any]:
        return {"healthy": self.started, "backend": self.name, "tick_count": 0, "last_tick": None}


@pytest.fixture
def recording_dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def manual_backend() -> ManualBackend:
    return ManualBackend()


@pytest.fixture
def wednesday_0915() -> datetime:
    # 2026-10-21 is a Wednesday
    return datetime(2026, 10, 21, 9, 15, 0)
