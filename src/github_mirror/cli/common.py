"""Shared pieces of the ``ghmirror`` commands.

- ``run_async_command``: drive a command coroutine to completion, turning
  unexpected errors into a red one-line message and exit code 1
- Option aliases reused across command groups
- ``print_run_result``: table or JSON rendering of a sync run
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Coroutine
from typing import Annotated, Any, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from github_mirror.db.engine import dispose_engine
from github_mirror.github.sync.enums import FailurePolicy, OutputFormat
from github_mirror.logging import get_logger

console = Console()
logger = get_logger(__name__)

T = TypeVar("T")


async def _with_engine_cleanup(coro: Coroutine[object, object, T]) -> T:
    # Each command gets its own event loop; pooled connections must not outlive it
    try:
        return await coro
    finally:
        await dispose_engine()


def run_async_command(
    coro: Coroutine[object, object, T],
    *,
    error_prefix: str = "Error",
) -> T:
    """Run ``coro`` on a fresh event loop and return its result.

    ``typer.Exit`` passes through untouched. Any other exception is printed
    as ``<error_prefix>: <message>`` (the traceback goes to the DEBUG log)
    and becomes exit code 1.
    """
    try:
        return asyncio.run(_with_engine_cleanup(coro))
    except typer.Exit:
        raise
    except Exception as e:
        logger.opt(exception=e).debug("{} (traceback)", error_prefix)
        console.print(f"[red]{error_prefix}:[/red] {e}")
        raise typer.Exit(1) from None


# Option aliases (Annotated keeps typer.Option calls out of default values)

OutputFormatOption = Annotated[
    OutputFormat,
    typer.Option("--format", "-f", help="text (table) or json"),
]

PolicyOption = Annotated[
    FailurePolicy | None,
    typer.Option(
        "--policy",
        "-p",
        help="fail_fast or best_effort (default: the configured policy for the command)",
    ),
]

OwnerOption = Annotated[
    str,
    typer.Option("--owner", "-o", help="GitHub user id of a stored integration"),
]
"""The owner whose stored access token a command runs with."""


# -----------------------------------------------------------------------------
# Output
# -----------------------------------------------------------------------------


def _outcome_style(outcome: str) -> str:
    match outcome:
        case "success":
            return "[green]success[/green]"
        case "partial_failure":
            return "[yellow]partial failure[/yellow]"
        case "fatal":
            return "[red]fatal[/red]"
        case _:
            return outcome


def print_run_result(result: dict[str, Any], output_format: OutputFormat, *, title: str) -> None:
    """Render a ``SyncRunResult.to_dict()`` and exit non-zero if the run failed."""
    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(result))
    else:
        summary = result["summary"]
        console.print(f"[bold]{title}[/bold] (policy: {summary['policy']})")
        console.print()

        table = Table()
        table.add_column("Stage", style="bold")
        table.add_column("Outcome")
        table.add_column("Items", justify="right")
        table.add_column("Repos", justify="right")
        table.add_column("Duration", justify="right")
        for stage in result["stages"]:
            table.add_row(
                stage["stage"],
                _outcome_style(stage["outcome"]),
                str(stage["items"]),
                str(stage["repositories"]),
                f"{stage['duration_seconds']:.1f}s",
            )
        console.print(table)

        console.print()
        console.print(f"  Repositories: {summary['total_repos']}")
        console.print(f"  All synced:   {summary['all_synced']}")
        console.print(f"  Duration:     {summary['duration_seconds']:.1f}s")

        failures = [f for stage in result["stages"] for f in stage.get("failures", [])]
        if failures:
            console.print()
            console.print("[bold]Failures:[/bold]")
            for failure in failures:
                where = failure["repository"] or "(stage)"
                console.print(f"  [red]{failure['stage']}[/red] {where}: {failure['error']}")
        if summary["lease_lost"]:
            console.print("\n[red]Run stopped: the sync lease was lost (disconnect or takeover).[/red]")
        elif summary["aborted"]:
            console.print("\n[red]Run aborted (fail-fast).[/red]")

    if not result["summary"]["success"]:
        raise typer.Exit(1)
