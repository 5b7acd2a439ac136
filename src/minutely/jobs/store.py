"""
JobStore - the single owner of all job records.

The HTTP layer (worker threads of the ASGI server) and the scheduling
thread both touch the store, so every read and mutation goes through
one mutex.  Callers only ever receive copies; the live records never
leave this module.

    create ──┐
    delete ──┼──► _lock ──► _jobs (insertion-ordered dict)
    claim  ──┘

Tags:
    jobs, store, single-writer, minutely
"""

from __future__ import annotations

import threading
from dataclasses import replace

from minutely.core.errors import JobNotFoundError
from minutely.core.logging import get_logger
from minutely.jobs.models import Job, Recurrence

logger = get_logger(__name__)


class JobStore:
    """In-memory, insertion-ordered job collection."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._jobs: dict[int, Job] = {}
        self._next_id = 1

    def add(self, rule: Recurrence) -> Job:
        """Store a new job with the next id and return a copy of it."""
        with self._lock:
            job = Job(id=self._next_id, rule=rule)
            self._next_id += 1
            self._jobs[job.id] = job
            logger.debug("job_stored", job_id=job.id, type=rule.type.value)
            return replace(job)

    def get(self, job_id: int) -> Job:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                raise JobNotFoundError(job_id)
            return replace(job)

    def remove(self, job_id: int) -> Job:
        """Remove and return a job. Its id is never handed out again."""
        with self._lock:
            job = self._jobs.pop(job_id, None)
            if job is None:
                raise JobNotFoundError(job_id)
            logger.debug("job_removed", job_id=job_id)
            return job

    def snapshot(self) -> list[Job]:
        """Copies of all jobs, in insertion order."""
        with self._lock:
            return [replace(job) for job in self._jobs.values()]

    def claim(self, job_id: int, minute_key: str) -> bool:
        """Record a dispatch decision for ``minute_key``.

        Returns True only for the caller that moved ``last_run_key`` to
        ``minute_key``.  Returns False if the job was already claimed for
        this minute or has been deleted in the meantime.
        """
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None or job.last_run_key == minute_key:
                return False
            job.last_run_key = minute_key
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)
