"""FastAPI dependencies: database session, session owner and services."""

from collections.abc import AsyncGenerator, Callable

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from github_mirror.config import Settings, get_settings
from github_mirror.db.engine import get_session
from github_mirror.github.client import GitHubClient
from github_mirror.github.oauth import GitHubOAuth
from github_mirror.github.sync import SyncLauncher

from .errors import AuthenticationRequiredError

SESSION_OWNER_KEY = "owner_id"


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session committed after the request (rolled back on error)."""
    async with get_session() as session:
        yield session


def get_optional_owner(request: Request) -> str | None:
    """Owner id stored in the signed session cookie, if any."""
    return request.session.get(SESSION_OWNER_KEY)


def get_current_owner(owner_id: str | None = Depends(get_optional_owner)) -> str:
    """Owner id of an authenticated caller.

    Raises:
        AuthenticationRequiredError: If the session carries no owner
    """
    if not owner_id:
        raise AuthenticationRequiredError()
    return owner_id


def get_app_settings() -> Settings:
    return get_settings()


def get_oauth() -> GitHubOAuth:
    """OAuth helper for the configured app (ConfigurationError if unconfigured)."""
    return GitHubOAuth()


def get_client_factory() -> Callable[[str], GitHubClient]:
    """Factory building a GitHub client from an access token."""
    return GitHubClient


def get_launcher(request: Request) -> SyncLauncher:
    launcher: SyncLauncher = request.app.state.launcher
    return launcher
