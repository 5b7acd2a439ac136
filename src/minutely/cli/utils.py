"""
CLI utility helpers - consoles and settings loading.
"""

from __future__ import annotations

import typer
from rich.console import Console

from minutely.api.settings import MinutelyAPISettings, load_api_settings
from minutely.core.errors import ConfigError
from minutely.core.logging import configure_logging

console = Console()
err_console = Console(stderr=True)


def load_settings(log_level: str | None = None) -> MinutelyAPISettings:
    """Load settings from the environment and configure logging from them.

    Invalid configuration is reported on stderr and exits with code 2.
    """
    try:
        settings = load_api_settings()
    except ConfigError as e:
        err_console.print(f"[red]Configuration error:[/red] {e.message}")
        raise typer.Exit(code=2) from None

    configure_logging(
        level=log_level or settings.log_level,
        json_format=settings.json_logs,
        service="minutely",
    )
    return settings
