"""
Shared pytest fixtures for minutely tests.

This module provides:
- A fresh job store / registry per test
- API settings with the scheduler loop disabled
- A FastAPI TestClient bound to a fresh app
- A directory worker tasks write their job ids into
"""

from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from minutely.api.app import create_app
from minutely.api.settings import MinutelyAPISettings
from minutely.jobs.registry import JobRegistry
from minutely.jobs.store import JobStore


@pytest.fixture
def store() -> JobStore:
    return JobStore()


@pytest.fixture
def registry(store: JobStore) -> JobRegistry:
    return JobRegistry(store)


@pytest.fixture
def api_settings() -> MinutelyAPISettings:
    """Settings that never start the tick loop on their own."""
    return MinutelyAPISettings(
        scheduler_enabled=False,
        worker_start_method="spawn",
        job_task="tests._support.tasks.succeed",
        _env_file=None,
    )


@pytest.fixture
def app(api_settings: MinutelyAPISettings):
    return create_app(settings=api_settings)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def output_dir(tmp_path, monkeypatch):
    """Directory the recording worker tasks write into (inherited via env)."""
    monkeypatch.setenv("MINUTELY_TEST_OUTPUT_DIR", str(tmp_path))
    return tmp_path
