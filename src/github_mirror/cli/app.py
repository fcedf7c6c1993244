"""``ghmirror`` entry point: global flags, ``serve`` and the command groups."""

from pathlib import Path
from typing import Annotated

import typer
import uvicorn
from rich.console import Console

from github_mirror import __version__
from github_mirror.cli import db as db_cmd
from github_mirror.cli import github as github_cmd
from github_mirror.cli import sync as sync_cmd
from github_mirror.config import get_settings
from github_mirror.logging import get_logger, setup_logging

app = typer.Typer(
    name="ghmirror",
    help="Mirror a GitHub account into a local database and serve it over HTTP.",
    add_completion=False,
    no_args_is_help=True,
)
app.add_typer(db_cmd.app, name="db")
app.add_typer(github_cmd.app, name="github")
app.add_typer(sync_cmd.app, name="sync")

console = Console()
logger = get_logger(__name__)


def _print_version(value: bool) -> None:
    if value:
        console.print(f"ghmirror {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log at DEBUG level.")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Only log warnings and errors.")] = False,
    log_file: Annotated[
        Path | None,
        typer.Option("--log-file", help="Also write DEBUG logs here (overrides LOGGING__LOG_FILE)."),
    ] = None,
    _version: Annotated[
        bool,
        typer.Option("--version", callback=_print_version, is_eager=True, help="Print the version."),
    ] = False,
) -> None:
    """Sync a GitHub account into a local database and browse it."""
    settings = get_settings()
    file_settings = settings.logging
    if log_file is None and file_settings.log_file:
        log_file = Path(file_settings.log_file)

    setup_logging(
        settings.log_level,
        verbose=verbose,
        quiet=quiet,
        log_file=log_file,
        rotation=file_settings.rotation,
        retention=file_settings.retention,
        serialize=file_settings.serialize,
    )


@app.command()
def serve(
    host: Annotated[str | None, typer.Option("--host", help="Bind address (default: WEB__HOST).")] = None,
    port: Annotated[int | None, typer.Option("--port", help="Bind port (default: WEB__PORT).")] = None,
    reload: Annotated[bool, typer.Option("--reload", help="Restart when source files change.")] = False,
) -> None:
    """Run the OAuth flow and read API over HTTP."""
    web = get_settings().web
    bind_host = host or web.host
    bind_port = port or web.port
    logger.info("Serving on http://{}:{} (frontend {})", bind_host, bind_port, web.frontend_origin)

    # log_config=None keeps uvicorn on the loguru interceptors set up in main()
    uvicorn.run(
        "github_mirror.api.app:create_app",
        factory=True,
        host=bind_host,
        port=bind_port,
        reload=reload,
        log_config=None,
    )


if __name__ == "__main__":
    app()
