"""Sync commands for GitHub Mirror."""

from typing import Annotated, Any

import typer
from rich.table import Table

from github_mirror.config import get_settings
from github_mirror.db import get_session
from github_mirror.db.repositories import IntegrationRepository, SyncStatusRepository
from github_mirror.db.repositories.sync_status import STAGE_FLAGS
from github_mirror.github import (
    AccountSyncOrchestrator,
    ForkImportOrchestrator,
    GitHubClient,
    OutputFormat,
    SyncAlreadyRunningError,
)

from .common import (
    OutputFormatOption,
    OwnerOption,
    PolicyOption,
    console,
    print_run_result,
    run_async_command,
)

app = typer.Typer(help="Sync GitHub account data into the database")


@app.command("account")
def sync_account(
    owner: OwnerOption,
    policy: PolicyOption = None,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Resynchronize every collection of a connected account.

    Uses the access token stored by the OAuth callback.

    Examples:
        ghmirror sync account --owner 1001
        ghmirror sync account --owner 1001 --policy best_effort --format json
    """

    async def _sync() -> dict[str, Any]:
        async with get_session() as session:
            integration = await IntegrationRepository(session).get_by_owner(owner)
            if integration is None:
                console.print(f"[red]Error:[/red] No integration stored for owner {owner}")
                raise typer.Exit(1)

            async with GitHubClient(integration.access_token) as client:
                orchestrator = AccountSyncOrchestrator(client, session, policy=policy)
                try:
                    result = await orchestrator.run(owner)
                except SyncAlreadyRunningError as e:
                    console.print(f"[yellow]Skipped:[/yellow] {e}")
                    raise typer.Exit(1) from None
                return result.to_dict()

    if output_format == OutputFormat.TEXT:
        console.print(f"[dim]Syncing account {owner}...[/dim]")
    result = run_async_command(_sync(), error_prefix="Sync failed")
    print_run_result(result, output_format, title="Account Sync Complete")


@app.command("forks")
def sync_forks(
    owner: Annotated[
        str | None,
        typer.Option(
            "--owner",
            "-o",
            help="Owner id to store rows under (defaults to the token's user id)",
        ),
    ] = None,
    token: Annotated[
        str | None,
        typer.Option(
            "--token",
            "-t",
            help="GitHub token (defaults to GITHUB_TOKEN)",
        ),
    ] = None,
    policy: PolicyOption = None,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Import commits, pull requests and issues of the parents of your forks.

    Each fork is resolved to its parent repository; duplicates are imported
    once. Rows are capped per repository and written without pruning.

    Examples:
        ghmirror sync forks
        ghmirror sync forks --owner 1001 --policy fail_fast
    """
    access_token = token or get_settings().github_token
    if not access_token:
        console.print("[red]Error:[/red] GITHUB_TOKEN not set in environment")
        raise typer.Exit(1)

    async def _sync() -> dict[str, Any]:
        async with GitHubClient(access_token) as client:
            owner_id = owner
            if owner_id is None:
                user = await client.get_authenticated_user()
                owner_id = str(user.id)
                if output_format == OutputFormat.TEXT:
                    console.print(f"[dim]Authenticated as {user.login} (owner {owner_id})[/dim]")

            async with get_session() as session:
                orchestrator = ForkImportOrchestrator(client, session, policy=policy)
                try:
                    result = await orchestrator.run(owner_id)
                except SyncAlreadyRunningError as e:
                    console.print(f"[yellow]Skipped:[/yellow] {e}")
                    raise typer.Exit(1) from None
                return result.to_dict()

    result = run_async_command(_sync(), error_prefix="Fork import failed")
    print_run_result(result, output_format, title="Fork Import Complete")


@app.command("status")
def sync_status(owner: OwnerOption) -> None:
    """Show the sync progress record of an owner.

    Examples:
        ghmirror sync status --owner 1001
    """

    async def _status() -> dict[str, Any] | None:
        async with get_session() as session:
            status = await SyncStatusRepository(session).get_by_owner(owner)
            if status is None:
                return None
            flags: dict[str, Any] = {flag: getattr(status, flag) for flag in STAGE_FLAGS}
            flags["all_synced"] = status.all_synced
            flags["updated_at"] = status.updated_at
            return flags

    flags = run_async_command(_status())
    if flags is None:
        console.print(f"[yellow]No sync has run for owner {owner}[/yellow]")
        return

    table = Table(title=f"Sync status for {owner}")
    table.add_column("Stage", style="bold")
    table.add_column("Synced")
    for flag in (*STAGE_FLAGS, "all_synced"):
        table.add_row(flag, "[green]yes[/green]" if flags[flag] else "[red]no[/red]")
    console.print(table)
    console.print(f"  Updated: {flags['updated_at']:%Y-%m-%d %H:%M:%S}")
