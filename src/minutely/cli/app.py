"""
Root Typer application for the minutely CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from minutely import __version__

app = Typer(
    name="minutely",
    help="minutely - a minute-resolution recurring job scheduler.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"minutely {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """minutely CLI - serve the scheduler API and inspect jobs."""


from minutely.cli.job import app as job_app  # noqa: E402
from minutely.cli.serve import app as serve_app  # noqa: E402

app.add_typer(serve_app, name="serve", help="Run the API server and scheduler.")
app.add_typer(job_app, name="job", help="Run or inspect jobs.")


if __name__ == "__main__":  # pragma: no cover
    app()
