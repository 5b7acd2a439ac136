"""
Job model - a recurrence rule plus scheduling state.

The three recurrence variants each carry exactly the fields they need,
so a job whose fields disagree with its type cannot be built:

    ┌──────────────┬────────┬──────┬─────────────┐
    │ variant      │ minute │ hour │ day_of_week │
    ├──────────────┼────────┼──────┼─────────────┤
    │ HourlyRule   │  0-59  │  -   │      -      │
    │ DailyRule    │  0-59  │ 0-23 │      -      │
    │ WeeklyRule   │  0-59  │ 0-23 │ 0-6 (0=Sun) │
    └──────────────┴────────┴──────┴─────────────┘

Ranges are enforced in ``__post_init__``.  Client-facing validation
messages are produced one layer up by :mod:`minutely.jobs.registry`.

Tags:
    jobs, recurrence, tagged-union, minutely

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar


class JobType(str, Enum):
    """Recurrence variant of a job."""

    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"


MINUTE_RANGE = range(0, 60)
HOUR_RANGE = range(0, 24)
DAY_OF_WEEK_RANGE = range(0, 7)


def is_in_range(value: Any, valid: range) -> bool:
    """True if ``value`` is a plain int (not bool) within ``valid``."""
    return isinstance(value, int) and not isinstance(value, bool) and value in valid


def _require(name: str, value: Any, valid: range) -> None:
    if not is_in_range(value, valid):
        raise ValueError(f"{name} must be an integer in {valid.start}-{valid.stop - 1}, got {value!r}")


@dataclass(frozen=True)
class HourlyRule:
    """Fires once per hour, at ``minute``."""

    minute: int

    type: ClassVar[JobType] = JobType.HOURLY

    def __post_init__(self) -> None:
        _require("minute", self.minute, MINUTE_RANGE)


@dataclass(frozen=True)
class DailyRule:
    """Fires once per day, at ``hour:minute``."""

    hour: int
    minute: int

    type: ClassVar[JobType] = JobType.DAILY

    def __post_init__(self) -> None:
        _require("hour", self.hour, HOUR_RANGE)
        _require("minute", self.minute, MINUTE_RANGE)


@dataclass(frozen=True)
class WeeklyRule:
    """Fires once per week, on ``day_of_week`` (0 = Sunday) at ``hour:minute``."""

    day_of_week: int
    hour: int
    minute: int

    type: ClassVar[JobType] = JobType.WEEKLY

    def __post_init__(self) -> None:
        _require("day_of_week", self.day_of_week, DAY_OF_WEEK_RANGE)
        _require("hour", self.hour, HOUR_RANGE)
        _require("minute", self.minute, MINUTE_RANGE)


Recurrence = HourlyRule | DailyRule | WeeklyRule


@dataclass
class Job:
    """A registered recurring job.

    Attributes:
        id: Monotonically assigned, never reused.
        rule: The recurrence variant.
        last_run_key: Minute key ("YYYY-MM-DDTHH:MM", UTC) of the most recent
            dispatch decision, or None if the job has never been dispatched.
    """

    id: int
    rule: Recurrence
    last_run_key: str | None = None

    @property
    def type(self) -> JobType:
        return self.rule.type

    def to_dict(self) -> dict[str, Any]:
        """Wire representation used by the HTTP layer."""
        rule = self.rule
        return {
            "id": self.id,
            "type": rule.type.value,
            "minute": rule.minute,
            "hour": getattr(rule, "hour", None),
            "dayOfWeek": getattr(rule, "day_of_week", None),
            "lastRun": self.last_run_key,
        }
