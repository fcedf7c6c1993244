"""GitHub OAuth app: authorization URL and code-for-token exchange."""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import urlencode

import httpx

from github_mirror.config import GitHubConfig, get_settings
from github_mirror.logging import get_logger

from .exceptions import OAuthExchangeError

logger = get_logger(__name__)


@dataclass(frozen=True)
class OAuthToken:
    """Access token returned by the token exchange."""

    access_token: str
    token_type: str = "bearer"
    scopes: list[str] = field(default_factory=list)


class GitHubOAuth:
    """OAuth web-flow helper for the configured GitHub OAuth app.

    Usage:
        oauth = GitHubOAuth()
        url = oauth.authorize_url()
        token = await oauth.exchange_code(code)
    """

    def __init__(
        self,
        config: GitHubConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize from the ``github`` settings section.

        Raises:
            ConfigurationError: If the client ID or secret is missing
        """
        self._config = config or get_settings().github
        self._config.require_oauth_credentials()
        self._transport = transport

    def authorize_url(self, state: str | None = None) -> str:
        """Build the URL the browser is redirected to for consent."""
        params = {
            "client_id": self._config.client_id,
            "redirect_uri": self._config.redirect_uri,
            "scope": " ".join(self._config.scopes),
            "prompt": "consent",
        }
        if state:
            params["state"] = state
        return f"{self._config.oauth_url}/login/oauth/authorize?{urlencode(params)}"

    async def exchange_code(self, code: str) -> OAuthToken:
        """Exchange an authorization code for an access token.

        Raises:
            OAuthExchangeError: If the request fails or GitHub returns no token
        """
        url = f"{self._config.oauth_url}/login/oauth/access_token"
        payload = {
            "client_id": self._config.client_id,
            "client_secret": self._config.client_secret,
            "code": code,
            "redirect_uri": self._config.redirect_uri,
        }
        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(url, data=payload, headers={"Accept": "application/json"})
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise OAuthExchangeError(f"Token exchange failed: {e}") from e

        # GitHub reports exchange errors with a 200 and an "error" field
        access_token = data.get("access_token")
        if not access_token:
            error = data.get("error_description") or data.get("error") or "no access token"
            raise OAuthExchangeError(f"Token exchange failed: {error}")

        scopes = [s for s in data.get("scope", "").split(",") if s]
        logger.debug("Exchanged OAuth code (scopes: {})", ",".join(scopes))
        return OAuthToken(
            access_token=access_token,
            token_type=data.get("token_type", "bearer"),
            scopes=scopes,
        )
