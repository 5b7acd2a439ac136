"""
CLI: ``minutely job`` - run a job task once, or check a rule against a time.
"""

from __future__ import annotations

from datetime import datetime

import typer

from minutely.cli.utils import console, err_console, load_settings
from minutely.core.errors import JobValidationError
from minutely.jobs.registry import parse_rule
from minutely.scheduling.dispatcher import WorkerDispatcher, WorkerResult
from minutely.scheduling.matcher import is_due, minute_key

app = typer.Typer(no_args_is_help=True)


@app.command("run")
def run_job(
    job_id: int = typer.Argument(..., help="Job id passed to the task"),
    task: str | None = typer.Option(None, "--task", help="Dotted task path (default: MINUTELY_JOB_TASK)"),
    timeout: float | None = typer.Option(None, "--timeout", help="Give up waiting after N seconds"),
) -> None:
    """Run the job task once in a worker process and report the outcome."""
    settings = load_settings()
    dispatcher = WorkerDispatcher(task or settings.job_task, start_method=settings.worker_start_method)

    results: list[WorkerResult] = []
    dispatcher.add_listener(results.append)
    dispatcher.dispatch(job_id)

    if not dispatcher.wait_idle(timeout) or not results:
        err_console.print(f"[yellow]Job #{job_id} still running after {timeout}s[/yellow]")
        raise typer.Exit(code=2)

    result = results[0]
    if result.ok:
        console.print(f"[green]Job #{job_id} succeeded[/green]")
        return
    err_console.print(f"[red]Job #{job_id} {result.outcome.value}:[/red] {result.error}")
    raise typer.Exit(code=1)


@app.command("due")
def due(
    job_type: str = typer.Option(..., "--type", "-t", help="hourly, daily, or weekly"),
    minute: int | None = typer.Option(None, "--minute", "-m"),
    hour: int | None = typer.Option(None, "--hour", "-H"),
    day_of_week: int | None = typer.Option(None, "--day-of-week", "-d", help="0 = Sunday"),
    at: datetime | None = typer.Option(None, "--at", help="Instant to check (default: now)"),
) -> None:
    """Tell whether a recurrence rule is due at a given instant."""
    try:
        rule = parse_rule({"type": job_type, "minute": minute, "hour": hour, "dayOfWeek": day_of_week})
    except JobValidationError as e:
        err_console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(code=2) from None

    now = at or datetime.now()
    verdict = "[green]due[/green]" if is_due(rule, now) else "[dim]not due[/dim]"
    console.print(f"{rule.type.value} rule is {verdict} at {now.isoformat(timespec='minutes')} (key {minute_key(now)})")
