"""Tests for minutely.core.errors module."""

import pytest

from minutely.core.errors import (
    ConfigError,
    ErrorCategory,
    JobExecutionError,
    JobNotFoundError,
    JobValidationError,
    MinutelyError,
)


class TestMinutelyError:
    """Test the base error."""

    def test_defaults_to_internal(self):
        err = MinutelyError("boom")
        assert err.category == ErrorCategory.INTERNAL
        assert err.message == "boom"
        assert str(err) == "boom"

    def test_with_context_chains(self):
        err = MinutelyError("boom").with_context(job_id=3)
        assert err.context == {"job_id": 3}

    def test_cause_is_chained(self):
        cause = OSError("disk full")
        err = MinutelyError("boom", cause=cause)
        assert err.__cause__ is cause
        assert err.to_dict()["cause"] == "OSError: disk full"

    def test_to_dict(self):
        d = JobValidationError("bad minute", context={"type": "hourly"}).to_dict()
        assert d == {
            "error_type": "JobValidationError",
            "message": "bad minute",
            "category": "VALIDATION",
            "context": {"type": "hourly"},
        }

    def test_repr(self):
        assert repr(ConfigError("bad")) == "ConfigError('bad', category=CONFIG)"


class TestSubclasses:
    """Each subclass carries its own category."""

    @pytest.mark.parametrize(
        "err, category",
        [
            (JobValidationError("x"), ErrorCategory.VALIDATION),
            (JobNotFoundError(1), ErrorCategory.NOT_FOUND),
            (JobExecutionError(1, "x"), ErrorCategory.EXECUTION),
            (ConfigError("x"), ErrorCategory.CONFIG),
        ],
    )
    def test_category(self, err, category):
        assert err.category == category
        assert isinstance(err, MinutelyError)

    def test_not_found_message(self):
        err = JobNotFoundError(42)
        assert err.message == "Job not found"
        assert err.job_id == 42
        assert err.context == {"job_id": 42}

    def test_not_found_without_id(self):
        assert JobNotFoundError().context == {}

    def test_execution_error_exit_code(self):
        err = JobExecutionError(5, "crashed", exit_code=-9)
        assert err.exit_code == -9
        assert err.context == {"job_id": 5, "exit_code": -9}
