"""
JobRegistry - the contract the HTTP layer consumes.

``create`` turns an untrusted payload into one of the recurrence
variants, raising :class:`JobValidationError` with a client-facing
message when the payload does not describe a valid job.  Validation
happens before the store is touched, so a rejected payload consumes
no id.

Example:
    >>> registry = JobRegistry(JobStore())
    >>> registry.create({"type": "hourly", "minute": 30}).to_dict()["id"]
    1
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from minutely.core.errors import JobNotFoundError, JobValidationError
from minutely.core.logging import get_logger
from minutely.jobs.models import (
    DAY_OF_WEEK_RANGE,
    HOUR_RANGE,
    MINUTE_RANGE,
    DailyRule,
    HourlyRule,
    Job,
    JobType,
    Recurrence,
    WeeklyRule,
    is_in_range,
)
from minutely.jobs.store import JobStore

logger = get_logger(__name__)

INVALID_TYPE_MESSAGE = 'type must be "hourly", "daily", or "weekly"'
HOURLY_MESSAGE = "For hourly jobs, minute must be 0–59"
DAILY_MESSAGE = "For daily jobs, hour 0–23 and minute 0–59 are required"
WEEKLY_MESSAGE = "For weekly jobs, dayOfWeek 0–6 (0=Sunday), hour 0–23, minute 0–59 are required"


def parse_rule(payload: Mapping[str, Any]) -> Recurrence:
    """Build a recurrence rule from a ``{type, minute, hour, dayOfWeek}`` mapping.

    Fields a variant does not use are ignored.

    Raises:
        JobValidationError: If the type is missing/unknown or a required
            field is missing or out of range.
    """
    raw_type = payload.get("type")
    try:
        job_type = JobType(raw_type)
    except ValueError:
        raise JobValidationError(INVALID_TYPE_MESSAGE, context={"field": "type"}) from None

    minute = payload.get("minute")
    hour = payload.get("hour")
    day_of_week = payload.get("dayOfWeek")

    match job_type:
        case JobType.HOURLY:
            if not is_in_range(minute, MINUTE_RANGE):
                raise JobValidationError(HOURLY_MESSAGE, context={"type": job_type.value})
            return HourlyRule(minute=minute)
        case JobType.DAILY:
            if not (is_in_range(hour, HOUR_RANGE) and is_in_range(minute, MINUTE_RANGE)):
                raise JobValidationError(DAILY_MESSAGE, context={"type": job_type.value})
            return DailyRule(hour=hour, minute=minute)
        case JobType.WEEKLY:
            if not (
                is_in_range(day_of_week, DAY_OF_WEEK_RANGE)
                and is_in_range(hour, HOUR_RANGE)
                and is_in_range(minute, MINUTE_RANGE)
            ):
                raise JobValidationError(WEEKLY_MESSAGE, context={"type": job_type.value})
            return WeeklyRule(day_of_week=day_of_week, hour=hour, minute=minute)


class JobRegistry:
    """Create, list, and delete jobs on top of a :class:`JobStore`."""

    def __init__(self, store: JobStore) -> None:
        self.store = store

    def create(self, payload: Mapping[str, Any]) -> Job:
        """Validate ``payload`` and store a new job with ``last_run_key=None``."""
        rule = parse_rule(payload)
        job = self.store.add(rule)
        logger.info("job_created", job_id=job.id, type=job.type.value)
        return job

    def list(self) -> list[Job]:
        """All current jobs in insertion order."""
        return self.store.snapshot()

    def get(self, job_id: int) -> Job:
        return self.store.get(job_id)

    def delete(self, job_id: int) -> Job:
        """Remove a job. Executions already dispatched for it keep running.

        Raises:
            JobNotFoundError: If no job has ``job_id``.
        """
        try:
            job = self.store.remove(job_id)
        except JobNotFoundError:
            logger.info("job_delete_not_found", job_id=job_id)
            raise
        logger.info("job_deleted", job_id=job_id)
        return job
