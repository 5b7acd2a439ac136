"""Job model, store, and registry."""

from minutely.jobs.models import DailyRule, HourlyRule, Job, JobType, Recurrence, WeeklyRule
from minutely.jobs.registry import JobRegistry, parse_rule
from minutely.jobs.store import JobStore

__all__ = [
    "JobType",
    "HourlyRule",
    "DailyRule",
    "WeeklyRule",
    "Recurrence",
    "Job",
    "JobStore",
    "JobRegistry",
    "parse_rule",
]
