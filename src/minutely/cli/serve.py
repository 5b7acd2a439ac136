"""
CLI: ``minutely serve`` - start the API server and scheduler.
"""

from __future__ import annotations

import typer
import uvicorn

from minutely.cli.utils import console, load_settings

app = typer.Typer(no_args_is_help=True)


@app.command("start")
def start(
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address (default: MINUTELY_HOST)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port (default: MINUTELY_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on changes"),
    log_level: str = typer.Option("info", "--log-level"),
) -> None:
    """Start the minutely REST API with its scheduler loop.

    Always a single worker process: jobs live in memory, so several
    server workers would each run their own scheduler.
    """
    settings = load_settings(log_level)
    host = host or settings.host
    port = port or settings.port

    console.print(f"[bold green]Starting minutely API[/bold green] on {host}:{port}")
    uvicorn.run(
        "minutely.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        workers=1,
        log_level=log_level,
    )
