"""Tests for WorkerDispatcher - real worker processes."""

from __future__ import annotations

import multiprocessing
import threading
import time

import pytest
import structlog
from structlog.testing import capture_logs

from minutely.scheduling import dispatcher as dispatcher_module
from minutely.scheduling.dispatcher import (
    MAX_ERROR_CHARS,
    WorkerDispatcher,
    WorkerOutcome,
    WorkerResult,
    classify,
    load_task,
)
from tests._support.tasks import send_large_signal

pytestmark = pytest.mark.slow

TIMEOUT = 60.0


def _run(task: str, *job_ids: int) -> list[WorkerResult]:
    dispatcher = WorkerDispatcher(f"tests._support.tasks.{task}", start_method="spawn")
    results: list[WorkerResult] = []
    dispatcher.add_listener(results.append)
    for job_id in job_ids:
        dispatcher.dispatch(job_id)
    assert dispatcher.wait_idle(TIMEOUT)
    return sorted(results, key=lambda r: r.job_id)


class TestClassify:
    def test_done_signal(self):
        assert classify(1, {"done": True}, 0).outcome is WorkerOutcome.SUCCEEDED

    def test_done_signal_wins_over_exit_code(self):
        assert classify(1, {"done": True}, 1).ok

    def test_error_signal(self):
        result = classify(1, {"done": False, "error": "RuntimeError: x"}, 0)
        assert result.outcome is WorkerOutcome.FAILED
        assert result.error == "RuntimeError: x"

    def test_crash(self):
        result = classify(1, None, 3)
        assert result.outcome is WorkerOutcome.CRASHED
        assert result.error == "Worker stopped with exit code 3"

    def test_killed_by_signal(self):
        assert classify(1, None, -9).outcome is WorkerOutcome.CRASHED

    def test_clean_exit_without_signal(self):
        result = classify(1, None, 0)
        assert result.outcome is WorkerOutcome.FAILED
        assert not result.ok


class TestLoadTask:
    def test_loads_default_task(self):
        from minutely.jobs.tasks import hello_world

        assert load_task("minutely.jobs.tasks.hello_world") is hello_world

    def test_missing_module(self):
        with pytest.raises(ModuleNotFoundError):
            load_task("minutely.nope.task")


class TestWorkerDispatcher:
    def test_success(self, output_dir):
        [result] = _run("succeed", 7)
        assert result.ok
        assert (output_dir / "7.ran").read_text() == "7"

    def test_error_signal(self, output_dir):
        [result] = _run("fail", 4)
        assert result.outcome is WorkerOutcome.FAILED
        assert "job 4 blew up" in result.error

    def test_crash(self, output_dir):
        [result] = _run("crash", 5)
        assert result.outcome is WorkerOutcome.CRASHED
        assert result.exit_code == 3

    def test_exit_without_signal(self):
        [result] = _run("exit_silently", 6)
        assert result.outcome is WorkerOutcome.FAILED
        assert result.exit_code == 0

    def test_unimportable_task_fails(self):
        [result] = _run("does_not_exist", 1)
        assert result.outcome is WorkerOutcome.FAILED
        assert "AttributeError" in result.error

    def test_failure_isolated_from_other_jobs(self, output_dir):
        results = _run("fail_odd", 1, 2, 3, 4)
        assert [r.ok for r in results] == [False, True, False, True]
        assert sorted(p.name for p in output_dir.iterdir()) == ["1.ran", "2.ran", "3.ran", "4.ran"]

    def test_dispatch_returns_before_completion(self, output_dir):
        dispatcher = WorkerDispatcher("tests._support.tasks.sleep_briefly", start_method="spawn")
        started = time.monotonic()
        dispatcher.dispatch(1)

        assert time.monotonic() - started < 2.0
        assert dispatcher.active_count == 1
        assert not (output_dir / "1.ran").exists()

        assert dispatcher.wait_idle(TIMEOUT)
        assert dispatcher.active_count == 0
        assert (output_dir / "1.ran").exists()

    def test_large_error_signal_is_reported(self):
        [result] = _run("fail_verbosely", 1)
        assert result.outcome is WorkerOutcome.FAILED
        assert result.error.startswith("RuntimeError: xxx")
        assert len(result.error) == MAX_ERROR_CHARS

    def test_watcher_drains_signal_before_join(self):
        ctx = multiprocessing.get_context("spawn")
        parent_conn, child_conn = ctx.Pipe(duplex=False)
        process = ctx.Process(target=send_large_signal, args=(child_conn,), daemon=True)
        process.start()
        child_conn.close()

        dispatcher = WorkerDispatcher(start_method="spawn")
        results: list[WorkerResult] = []
        dispatcher.add_listener(results.append)
        watcher = threading.Thread(target=dispatcher._watch, args=(1, process, parent_conn), daemon=True)
        watcher.start()
        watcher.join(TIMEOUT)

        assert not watcher.is_alive()
        assert results[0].outcome is WorkerOutcome.FAILED
        assert len(results[0].error) == len("RuntimeError: ") + 200_000

    def test_listener_error_does_not_break_reporting(self):
        dispatcher = WorkerDispatcher("tests._support.tasks.succeed", start_method="spawn")
        seen = []

        def bad_listener(result):
            raise RuntimeError("listener broke")

        dispatcher.add_listener(bad_listener)
        dispatcher.add_listener(seen.append)
        dispatcher.dispatch(9)
        assert dispatcher.wait_idle(TIMEOUT)
        assert [r.job_id for r in seen] == [9]


@pytest.fixture
def dispatcher_logs(monkeypatch):
    """Events logged by the dispatcher module."""
    with capture_logs() as logs:
        monkeypatch.setattr(dispatcher_module, "logger", structlog.get_logger())
        yield logs


class TestOutcomeLogging:
    @pytest.mark.parametrize(
        "task, job_id, outcome",
        [
            ("fail", 4, "failed"),
            ("crash", 5, "crashed"),
            ("exit_silently", 6, "failed"),
        ],
    )
    def test_each_failure_form_logs_job_failed(self, dispatcher_logs, output_dir, task, job_id, outcome):
        _run(task, job_id)

        failed = [e for e in dispatcher_logs if e["event"] == "job_failed"]
        assert len(failed) == 1
        assert failed[0]["job_id"] == job_id
        assert failed[0]["outcome"] == outcome
        assert failed[0]["log_level"] == "error"

    def test_success_logs_job_succeeded(self, dispatcher_logs, output_dir):
        _run("succeed", 2)

        events = [e["event"] for e in dispatcher_logs]
        assert "job_failed" not in events
        assert events.count("job_succeeded") == 1
        dispatched = next(e for e in dispatcher_logs if e["event"] == "job_dispatched")
        assert dispatched["job_id"] == 2
