"""
Jobs router - the HTTP face of the job registry.

GET    /jobs
POST   /jobs
DELETE /jobs/{job_id}

Validation and not-found failures are raised as minutely errors and
mapped to ``{"error": ...}`` bodies by the handlers in
:mod:`minutely.api.middleware.errors`.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Path
from pydantic import BaseModel, ConfigDict, Field

from minutely.api.deps import Registry
from minutely.core.errors import JobNotFoundError

router = APIRouter(prefix="/jobs")


class JobSchema(BaseModel):
    """Wire representation of a job."""

    id: int
    type: str
    minute: int
    hour: int | None = None
    dayOfWeek: int | None = None  # noqa: N815
    lastRun: str | None = None  # noqa: N815


class CreateJobBody(BaseModel):
    """Untyped on purpose: the registry owns the validation messages."""

    model_config = ConfigDict(populate_by_name=True)

    type: Any = None
    minute: Any = None
    hour: Any = None
    day_of_week: Any = Field(default=None, alias="dayOfWeek")

    def to_payload(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "minute": self.minute,
            "hour": self.hour,
            "dayOfWeek": self.day_of_week,
        }


class DeletedJobResponse(BaseModel):
    deleted: JobSchema


@router.get("", response_model=list[JobSchema])
def list_jobs(registry: Registry):
    """List all jobs in insertion order.

    Example:
        GET /jobs

        Response:
        [{"id": 1, "type": "hourly", "minute": 30, "hour": null,
          "dayOfWeek": null, "lastRun": "2026-10-19T13:30"}]
    """
    return [job.to_dict() for job in registry.list()]


@router.post("", response_model=JobSchema, status_code=201)
def create_job(registry: Registry, body: CreateJobBody | None = None):
    """Register a recurring job.

    Raises:
        400: Missing/unknown ``type`` or a missing/out-of-range field for that type.
            A missing body is treated as ``{}``.

    Example:
        POST /jobs
        {"type": "weekly", "dayOfWeek": 3, "hour": 9, "minute": 15}

        Response (201):
        {"id": 2, "type": "weekly", "minute": 15, "hour": 9,
         "dayOfWeek": 3, "lastRun": null}
    """
    job = registry.create(body.to_payload() if body is not None else {})
    return job.to_dict()


@router.delete("/{job_id}", response_model=DeletedJobResponse)
def delete_job(registry: Registry, job_id: str = Path(..., description="Job ID")):
    """Delete a job.

    Workers already dispatched for the job are not affected.

    Raises:
        404: No job with that id (including ids that are not integers).
    """
    try:
        ident = int(job_id)
    except ValueError:
        raise JobNotFoundError(job_id) from None
    job = registry.delete(ident)
    return {"deleted": job.to_dict()}
