"""
Health router - liveness plus scheduler status.

GET /health
"""

from __future__ import annotations

from fastapi import APIRouter

from minutely.api.deps import Scheduler

router = APIRouter()


@router.get("/health")
def health(scheduler: Scheduler):
    """Report service liveness and scheduler health.

    The endpoint answers 200 whenever the process can serve requests;
    ``scheduler.healthy`` tells whether the tick loop is running.
    """
    return {"status": "ok", "scheduler": scheduler.health().to_dict()}
