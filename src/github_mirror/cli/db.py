"""Database management commands."""

import typer

from github_mirror.cli.common import console, run_async_command
from github_mirror.config import get_settings
from github_mirror.db import create_tables

app = typer.Typer(help="Database commands")


@app.command("init")
def init_db() -> None:
    """Create every table that does not exist yet.

    Use Alembic (``alembic upgrade head``) for managed deployments.
    """
    run_async_command(create_tables(), error_prefix="Database init failed")
    console.print(f"[green]Database ready:[/green] {get_settings().database_url}")
