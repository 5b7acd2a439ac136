"""Tests for ``minutely job`` CLI commands."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from minutely.cli.app import app
from minutely.scheduling.dispatcher import WorkerOutcome, WorkerResult

runner = CliRunner()


class TestVersion:
    def test_version(self):
        from minutely import __version__

        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestJobDue:
    def test_weekly_due(self):
        result = runner.invoke(
            app, ["job", "due", "-t", "weekly", "-d", "3", "-H", "9", "-m", "15", "--at", "2026-10-21T09:15:30"]
        )
        assert result.exit_code == 0
        assert "not due" not in result.output
        assert "due" in result.output

    def test_weekly_wrong_day(self):
        result = runner.invoke(
            app, ["job", "due", "-t", "weekly", "-d", "4", "-H", "9", "-m", "15", "--at", "2026-10-21T09:15:00"]
        )
        assert result.exit_code == 0
        assert "not due" in result.output

    def test_invalid_rule(self):
        result = runner.invoke(app, ["job", "due", "-t", "hourly", "-m", "75"])
        assert result.exit_code == 2

    def test_unknown_type(self):
        result = runner.invoke(app, ["job", "due", "-t", "monthly", "-m", "5"])
        assert result.exit_code == 2


def _fake_dispatcher(result: WorkerResult | None, idle: bool = True):
    """A WorkerDispatcher stand-in that reports ``result`` on dispatch."""
    dispatcher = MagicMock()
    listeners = []
    dispatcher.add_listener.side_effect = listeners.append

    def dispatch(job_id):
        if result is not None:
            for listener in listeners:
                listener(result)

    dispatcher.dispatch.side_effect = dispatch
    dispatcher.wait_idle.return_value = idle
    return dispatcher


class TestJobRun:
    @patch("minutely.cli.job.WorkerDispatcher")
    def test_success(self, mock_cls):
        mock_cls.return_value = _fake_dispatcher(WorkerResult(7, WorkerOutcome.SUCCEEDED, exit_code=0))
        result = runner.invoke(app, ["job", "run", "7"])
        assert result.exit_code == 0
        assert "succeeded" in result.output

    @patch("minutely.cli.job.WorkerDispatcher")
    def test_failure(self, mock_cls):
        mock_cls.return_value = _fake_dispatcher(
            WorkerResult(7, WorkerOutcome.FAILED, exit_code=1, error="RuntimeError: boom")
        )
        result = runner.invoke(app, ["job", "run", "7"])
        assert result.exit_code == 1

    @patch("minutely.cli.job.WorkerDispatcher")
    def test_still_running(self, mock_cls):
        mock_cls.return_value = _fake_dispatcher(None, idle=False)
        result = runner.invoke(app, ["job", "run", "7", "--timeout", "0.1"])
        assert result.exit_code == 2

    @patch("minutely.cli.job.WorkerDispatcher")
    def test_task_option(self, mock_cls):
        mock_cls.return_value = _fake_dispatcher(WorkerResult(1, WorkerOutcome.SUCCEEDED, exit_code=0))
        runner.invoke(app, ["job", "run", "1", "--task", "tests._support.tasks.succeed"])
        assert mock_cls.call_args.args[0] == "tests._support.tasks.succeed"

    @pytest.mark.slow
    def test_real_worker(self, output_dir):
        result = runner.invoke(app, ["job", "run", "4", "--task", "tests._support.tasks.succeed", "--timeout", "60"])
        assert result.exit_code == 0
        assert (output_dir / "4.ran").exists()


class TestBadConfig:
    def test_invalid_env_exits_2(self, monkeypatch):
        monkeypatch.setenv("MINUTELY_TIMEZONE", "Mars/Olympus")
        result = runner.invoke(app, ["job", "run", "1"])
        assert result.exit_code == 2
