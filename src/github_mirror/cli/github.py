"""``ghmirror github``: check a token against the live API before syncing."""

from typing import Annotated

import typer
from rich.table import Table

from github_mirror.cli.common import console, run_async_command
from github_mirror.config import get_settings
from github_mirror.db import get_session
from github_mirror.db.repositories import IntegrationRepository
from github_mirror.github import (
    GitHubAuthenticationError,
    GitHubClient,
    GitHubClientError,
    GitHubRateLimitError,
)

app = typer.Typer(help="GitHub API commands")

LOW_RATE_LIMIT = 10


async def _stored_token(owner: str) -> str:
    async with get_session() as session:
        integration = await IntegrationRepository(session).get_by_owner(owner)
    if integration is None:
        console.print(f"[red]Error:[/red] No integration stored for owner {owner}")
        raise typer.Exit(1)
    return integration.access_token


@app.command("test")
def test_connection(
    token: Annotated[
        str | None,
        typer.Option("--token", "-t", help="Token to check (defaults to GITHUB_TOKEN)"),
    ] = None,
    owner: Annotated[
        str | None,
        typer.Option("--owner", "-o", help="Check the token stored for this owner instead"),
    ] = None,
) -> None:
    """Verify that a token authenticates and can see the account's organizations.

    Examples:
        ghmirror github test
        ghmirror github test --token ghp_xxx
        ghmirror github test --owner 1001
    """
    if owner is None and not (token or get_settings().github_token):
        console.print("[red]Error:[/red] GITHUB_TOKEN not set in environment")
        raise typer.Exit(1)

    async def _check() -> None:
        access_token = await _stored_token(owner) if owner else token or get_settings().github_token

        async with GitHubClient(access_token) as client:
            try:
                user = await client.get_authenticated_user()
                rate = await client.get_rate_limit()
                organizations = await client.list_organizations()
            except GitHubAuthenticationError:
                console.print("[red]Error:[/red] Invalid GitHub token")
                raise typer.Exit(1) from None
            except GitHubRateLimitError as e:
                reset = f" (resets at {e.reset_at:%H:%M:%S UTC})" if e.reset_at else ""
                console.print(f"[red]Error:[/red] Rate limit exceeded{reset}")
                raise typer.Exit(1) from None
            except GitHubClientError as e:
                console.print(f"[red]Error:[/red] {e}")
                raise typer.Exit(1) from None

        table = Table(show_header=False, box=None)
        table.add_row("Account", f"{user.login} (id {user.id})")
        table.add_row("Rate limit", f"{rate.remaining}/{rate.limit}, resets {rate.reset_at:%H:%M:%S UTC}")
        table.add_row("Organizations", ", ".join(org.login for org in organizations) or "(none visible)")
        console.print(table)

        if rate.remaining < LOW_RATE_LIMIT:
            console.print("[yellow]Warning:[/yellow] Low rate limit remaining")
        console.print("[green]Token verified.[/green]")

    run_async_command(_check(), error_prefix="Check failed")
