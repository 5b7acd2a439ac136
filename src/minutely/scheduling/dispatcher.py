"""Worker dispatcher - one isolated process per due job.

┌──────────────────────────────────────────────────────────────────────────────┐
│  WORKER DISPATCH                                                              │
│                                                                               │
│   scheduling thread                 watcher thread          worker process   │
│   ─────────────────                 ──────────────          ──────────────   │
│   dispatch(job_id) ──spawn──────────────────────────────►  task(job_id)      │
│        │           ──start watcher──► wait(conn, sentinel)        │           │
│        ▼ returns                            │            conn.send(signal)   │
│   (next job)                                ▼                    │ exit      │
│                                     recv() then join() ◄─────────┘           │
│                                     classify → log → listeners               │
│                                                                               │
│  Terminal signals:                                                            │
│    {"done": True}                   → SUCCEEDED                               │
│    {"done": False, "error": ...}    → FAILED                                  │
│    no signal, exit code != 0        → CRASHED                                 │
│    no signal, exit code 0           → FAILED                                  │
└──────────────────────────────────────────────────────────────────────────────┘

The worker only receives the job id and the task's dotted path, never a
reference into the store.  Outcomes are reported through logging and
listener callbacks; nothing is retried and no history is kept.
"""

from __future__ import annotations

import importlib
import multiprocessing
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from multiprocessing.connection import Connection, wait
from typing import Any

from minutely.core.errors import JobExecutionError
from minutely.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TASK = "minutely.jobs.tasks.hello_world"

# Error signals are cut to this length before crossing the pipe.
MAX_ERROR_CHARS = 2000


class WorkerOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CRASHED = "crashed"


@dataclass(frozen=True)
class WorkerResult:
    """Terminal outcome of one dispatch."""

    job_id: int
    outcome: WorkerOutcome
    exit_code: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is WorkerOutcome.SUCCEEDED


OutcomeListener = Callable[[WorkerResult], None]


def load_task(task_path: str) -> Callable[[int], Any]:
    """Import a task callable from its dotted path."""
    module_path, func_name = task_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, func_name)


def _run_job_in_process(task_path: str, job_id: int, conn: Connection) -> None:
    """Worker process entry point. The only thing sent across the process boundary."""
    try:
        task = load_task(task_path)
        task(job_id)
    except Exception as e:
        error = f"{type(e).__name__}: {e}"
        conn.send({"done": False, "error": error[:MAX_ERROR_CHARS]})
    else:
        conn.send({"done": True})
    finally:
        conn.close()


def classify(job_id: int, message: Any, exit_code: int | None) -> WorkerResult:
    """Turn a worker's terminal signal and exit code into a :class:`WorkerResult`.

    A signal, when present, decides the outcome; the exit code is only
    consulted when the worker sent nothing.
    """
    if isinstance(message, dict) and message.get("done"):
        return WorkerResult(job_id, WorkerOutcome.SUCCEEDED, exit_code=exit_code)
    if message is not None:
        error = message.get("error") if isinstance(message, dict) else None
        return WorkerResult(job_id, WorkerOutcome.FAILED, exit_code=exit_code, error=error or "Worker failed")
    if exit_code != 0:
        return WorkerResult(
            job_id,
            WorkerOutcome.CRASHED,
            exit_code=exit_code,
            error=f"Worker stopped with exit code {exit_code}",
        )
    return WorkerResult(
        job_id,
        WorkerOutcome.FAILED,
        exit_code=exit_code,
        error="Worker exited without a completion signal",
    )


class WorkerDispatcher:
    """Fire-and-forget dispatch of jobs to worker processes.

    Parameters
    ----------
    task_path : str
        Dotted path of the task callable run for every job.
    start_method : str | None
        ``multiprocessing`` start method (``"spawn"``, ``"fork"``,
        ``"forkserver"``); ``None`` uses the platform default.
    """

    name = "process"

    def __init__(
        self,
        task_path: str = DEFAULT_TASK,
        *,
        start_method: str | None = None,
    ) -> None:
        self.task_path = task_path
        self._ctx = multiprocessing.get_context(start_method)
        self._listeners: list[OutcomeListener] = []
        self._watchers: set[threading.Thread] = set()
        self._lock = threading.Lock()

    def add_listener(self, listener: OutcomeListener) -> None:
        """Register a callback invoked (on a watcher thread) with every outcome."""
        self._listeners.append(listener)

    def dispatch(self, job_id: int) -> None:
        """Start a worker for ``job_id`` and return immediately."""
        parent_conn, child_conn = self._ctx.Pipe(duplex=False)
        process = self._ctx.Process(
            target=_run_job_in_process,
            args=(self.task_path, job_id, child_conn),
            name=f"minutely-job-{job_id}",
            daemon=True,
        )
        try:
            process.start()
        except BaseException:
            parent_conn.close()
            raise
        finally:
            child_conn.close()

        watcher = threading.Thread(
            target=self._watch,
            args=(job_id, process, parent_conn),
            name=f"minutely-watch-{job_id}",
            daemon=True,
        )
        with self._lock:
            self._watchers.add(watcher)
            watcher.start()
        logger.info("job_dispatched", job_id=job_id, pid=process.pid, task=self.task_path)

    def _watch(self, job_id: int, process: Any, conn: Connection) -> None:
        try:
            message = None
            # Read before join: a worker blocked in send() never exits.
            if conn in wait([conn, process.sentinel]):
                try:
                    message = conn.recv()
                except (EOFError, OSError):
                    message = None
            process.join()
            result = classify(job_id, message, process.exitcode)
            self._report(result)
        finally:
            conn.close()
            with self._lock:
                self._watchers.discard(threading.current_thread())

    def _report(self, result: WorkerResult) -> None:
        if result.ok:
            logger.info("job_succeeded", job_id=result.job_id)
        else:
            error = JobExecutionError(result.job_id, result.error or "Worker failed", exit_code=result.exit_code)
            logger.error("job_failed", outcome=result.outcome.value, error=error.message, **error.context)

        for listener in list(self._listeners):
            try:
                listener(result)
            except Exception as e:
                logger.exception("outcome_listener_failed", job_id=result.job_id, error=str(e))

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Wait for every in-flight worker to be reported.

        Returns:
            True if no watcher is left running.
        """
        with self._lock:
            watchers = list(self._watchers)
        for watcher in watchers:
            watcher.join(timeout)
        with self._lock:
            return not any(w.is_alive() for w in self._watchers)

    @property
    def active_count(self) -> int:
        """Number of dispatched jobs whose outcome has not been reported yet."""
        with self._lock:
            return len(self._watchers)
