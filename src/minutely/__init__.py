"""
Minutely - a minute-resolution recurring job scheduler.

Clients register hourly, daily, or weekly jobs; a background loop aligned
to wall-clock minute boundaries decides which jobs are due and hands each
one to an isolated worker process.

Layout:
- minutely.core: errors, structured logging, settings
- minutely.jobs: job model, in-memory store, registry, job tasks
- minutely.scheduling: time alignment, due-job matching, worker dispatch
- minutely.api: FastAPI transport over the job registry
- minutely.cli: Typer command line
"""

__version__ = "0.1.0"
