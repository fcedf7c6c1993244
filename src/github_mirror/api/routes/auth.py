"""OAuth login, callback and logout.

Endpoints:
- GET /auth/github - Redirect to GitHub's consent page
- GET /auth/github/callback - Exchange the code, connect, start a sync
- GET /auth/logout - Clear the session
"""

from collections.abc import Callable

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from github_mirror.config import Settings
from github_mirror.github.client import GitHubClient
from github_mirror.github.exceptions import GitHubClientError
from github_mirror.github.integration import IntegrationService
from github_mirror.github.oauth import GitHubOAuth
from github_mirror.github.sync import SyncLauncher
from github_mirror.logging import get_logger

from ..dependencies import (
    SESSION_OWNER_KEY,
    get_app_settings,
    get_client_factory,
    get_db,
    get_launcher,
    get_oauth,
)
from ..errors import ApiError

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(__name__)


@router.get("/github")
async def redirect_to_github(oauth: GitHubOAuth = Depends(get_oauth)) -> RedirectResponse:
    return RedirectResponse(oauth.authorize_url(), status_code=302)


@router.get("/github/callback")
async def github_callback(
    request: Request,
    code: str | None = None,
    oauth: GitHubOAuth = Depends(get_oauth),
    db: AsyncSession = Depends(get_db),
    client_factory: Callable[[str], GitHubClient] = Depends(get_client_factory),
    launcher: SyncLauncher = Depends(get_launcher),
    settings: Settings = Depends(get_app_settings),
) -> RedirectResponse:
    """Complete the OAuth flow.

    Stores the integration, marks the session as logged in and starts an
    account sync in the background before redirecting to the frontend.
    """
    if not code:
        raise ApiError(400, "Missing code parameter")

    token = await oauth.exchange_code(code)
    try:
        async with client_factory(token.access_token) as client:
            owner_id = await IntegrationService(db).connect(client, token.access_token, token.scopes)
    except GitHubClientError as e:
        logger.error("OAuth callback failed: {}", e)
        raise ApiError(500, "Authentication failed") from e

    request.session[SESSION_OWNER_KEY] = owner_id
    launcher.launch(owner_id, token.access_token)
    return RedirectResponse(f"{settings.web.frontend_origin}/", status_code=302)


@router.get("/logout")
async def logout(request: Request, settings: Settings = Depends(get_app_settings)) -> RedirectResponse:
    request.session.clear()
    return RedirectResponse(f"{settings.web.frontend_origin}/", status_code=302)
