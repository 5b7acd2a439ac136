"""Job payloads executed inside worker processes.

A task is a top-level callable taking the job id.  It is referenced by
dotted path (``"minutely.jobs.tasks.hello_world"``) so the worker
process can import it; returning normally means success, raising means
an error signal.
"""

from __future__ import annotations

from datetime import datetime

from minutely.core.logging import get_logger

logger = get_logger(__name__)


def hello_world(job_id: int) -> None:
    """Default stub payload: announce the job."""
    logger.info("hello_world", job_id=job_id, at=datetime.now().isoformat(timespec="seconds"))
