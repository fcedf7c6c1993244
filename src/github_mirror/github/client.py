"""Async GitHub API client wrapper using httpx.

This module provides a typed async interface to the GitHub REST API for
the collections the mirror stores. Every paged listing goes through
:mod:`github_mirror.github.pagination`.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from github_mirror.config import get_settings
from github_mirror.logging import get_logger
from github_mirror.schemas.github_api import (
    GitHubCommit,
    GitHubIssue,
    GitHubOrganization,
    GitHubPullRequest,
    GitHubRateLimit,
    GitHubRelease,
    GitHubRepository,
    GitHubUser,
)

from .exceptions import (
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubNotFoundError,
    GitHubPayloadError,
    GitHubRateLimitError,
)
from .pagination import Endpoint, paginate

logger = get_logger(__name__)

PayloadT = TypeVar("PayloadT", bound=BaseModel)

API_VERSION = "2022-11-28"


class GitHubClient:
    """Async GitHub API client for account data retrieval.

    Usage:
        async with GitHubClient(token) as client:
            repos = await client.list_repositories()
            for repo in repos:
                print(repo.full_name)

    Or without context manager:
        client = GitHubClient(token)
        user = await client.get_authenticated_user()
        await client.close()
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        page_size: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            token: OAuth or personal access token. If not provided, uses
                   GITHUB_TOKEN from settings.
            base_url: API root (defaults to settings)
            timeout: Per-request transport timeout in seconds (defaults to settings)
            page_size: Items per page for listings (defaults to settings)
            transport: Optional httpx transport (tests use httpx.MockTransport)

        Raises:
            GitHubAuthenticationError: If no token is available.
        """
        settings = get_settings()
        self._token = token or settings.github_token
        if not self._token:
            raise GitHubAuthenticationError(
                "GitHub token required. Set GITHUB_TOKEN environment variable."
            )
        self._base_url = base_url or settings.github.api_url
        self._timeout = timeout or settings.github.timeout_seconds
        self._page_size = page_size or settings.sync.page_size
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def _http(self) -> httpx.AsyncClient:
        """Get or create the httpx client instance."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers={
                    "Authorization": f"Bearer {self._token}",
                    "Accept": "application/vnd.github+json",
                    "X-GitHub-Api-Version": API_VERSION,
                    "User-Agent": "github-mirror",
                },
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    @property
    def page_size(self) -> int:
        return self._page_size

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> GitHubClient:
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Async context manager exit."""
        await self.close()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------
    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET a path and return the decoded JSON body.

        Raises:
            GitHubClientError: On transport failure or an error status
        """
        try:
            response = await self._http.get(path, params=params)
        except httpx.HTTPError as e:
            raise GitHubClientError(f"Request to {path} failed: {e}") from e

        if response.is_error:
            raise self._handle_error(response)
        return response.json()

    async def fetch_page(self, endpoint: Endpoint, page: int, per_page: int) -> list[Any]:
        """Fetch one page of a listing endpoint.

        This is the page primitive handed to the pagination helpers.

        Returns:
            The raw items of the page
        """
        data = await self._get(endpoint.path, endpoint.with_page(page, per_page))
        if not isinstance(data, list):
            raise GitHubClientError(f"Expected a list from {endpoint.path}, got {type(data).__name__}")
        logger.debug("Fetched {} page {} ({} items)", endpoint.path, page, len(data))
        return data

    def _validate(self, model: type[PayloadT], data: Any, source: str) -> PayloadT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise GitHubPayloadError(f"Malformed {model.__name__} payload from {source}: {e}") from e

    def _parse_items(self, model: type[PayloadT], items: list[Any], source: str) -> list[PayloadT]:
        """Validate raw items; any malformed entry fails the whole listing.

        Raises:
            GitHubPayloadError: Naming how many items were malformed
        """
        parsed: list[PayloadT] = []
        first_error: ValidationError | None = None
        malformed = 0
        for item in items:
            try:
                parsed.append(model.model_validate(item))
            except ValidationError as e:
                malformed += 1
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise GitHubPayloadError(
                f"{malformed} of {len(items)} {model.__name__} items from {source} are malformed"
            ) from first_error
        return parsed

    async def _list(
        self,
        model: type[PayloadT],
        endpoint: Endpoint,
        *,
        per_page: int | None = None,
        max_items: int | None = None,
        max_pages: int | None = None,
    ) -> list[PayloadT]:
        items = await paginate(
            self.fetch_page,
            endpoint,
            per_page=per_page or self._page_size,
            max_items=max_items,
            max_pages=max_pages,
        )
        return self._parse_items(model, items, endpoint.path)

    # -------------------------------------------------------------------------
    # Account
    # -------------------------------------------------------------------------
    async def get_authenticated_user(self) -> GitHubUser:
        """Get the profile of the token's owner (GET /user)."""
        data = await self._get("/user")
        return self._validate(GitHubUser, data, "/user")

    async def get_rate_limit(self) -> GitHubRateLimit:
        """Get the core rate limit pool (GET /rate_limit)."""
        data = await self._get("/rate_limit")
        return self._validate(GitHubRateLimit, data["rate"], "/rate_limit")

    async def list_organizations(self) -> list[GitHubOrganization]:
        """List the organizations of the authenticated user."""
        return await self._list(GitHubOrganization, Endpoint("/user/orgs"))

    async def list_org_members(
        self,
        org: str,
        *,
        max_pages: int | None = None,
    ) -> list[GitHubUser]:
        """List members of an organization.

        Args:
            org: Organization login
            max_pages: Optional cap on member pages (None = all)
        """
        return await self._list(
            GitHubUser, Endpoint(f"/orgs/{org}/members"), max_pages=max_pages
        )

    # -------------------------------------------------------------------------
    # Repositories
    # -------------------------------------------------------------------------
    async def list_repositories(
        self,
        *,
        type: str | None = None,
        max_items: int | None = None,
    ) -> list[GitHubRepository]:
        """List repositories visible to the authenticated user.

        Args:
            type: Optional ``type`` filter passed to GET /user/repos
            max_items: Optional cap on repositories returned
        """
        params = {"type": type} if type else {}
        return await self._list(GitHubRepository, Endpoint("/user/repos", params), max_items=max_items)

    async def list_forks(self) -> list[GitHubRepository]:
        """List the authenticated user's repositories that are forks.

        The listing is filtered on the ``fork`` flag after pagination so a
        filtered-out entry never shortens a page.
        """
        repos = await self.list_repositories(type="fork")
        return [repo for repo in repos if repo.fork]

    async def get_repository(self, full_name: str) -> GitHubRepository:
        """Get a repository's detail record, including ``parent`` for forks.

        Raises:
            GitHubNotFoundError: If the repository doesn't exist
            GitHubPayloadError: If the detail record is malformed
        """
        data = await self._get(f"/repos/{full_name}")
        return self._validate(GitHubRepository, data, f"/repos/{full_name}")

    # -------------------------------------------------------------------------
    # Per-repository activity
    # -------------------------------------------------------------------------
    async def list_commits(
        self, full_name: str, *, max_items: int | None = None
    ) -> list[GitHubCommit]:
        """List commits on the default branch of a repository."""
        return await self._list(
            GitHubCommit, Endpoint(f"/repos/{full_name}/commits"), max_items=max_items
        )

    async def list_pull_requests(
        self, full_name: str, *, max_items: int | None = None
    ) -> list[GitHubPullRequest]:
        """List pull requests in every state."""
        return await self._list(
            GitHubPullRequest,
            Endpoint(f"/repos/{full_name}/pulls", {"state": "all"}),
            max_items=max_items,
        )

    async def list_issues(
        self, full_name: str, *, max_items: int | None = None
    ) -> list[GitHubIssue]:
        """List issues in every state, excluding pull requests.

        The cap applies to the raw listing, before pull requests are dropped.
        """
        issues = await self._list(
            GitHubIssue,
            Endpoint(f"/repos/{full_name}/issues", {"state": "all"}),
            max_items=max_items,
        )
        return [issue for issue in issues if not issue.is_pull_request]

    async def list_releases(
        self, full_name: str, *, per_page: int | None = None
    ) -> list[GitHubRelease]:
        """List releases of a repository."""
        return await self._list(
            GitHubRelease,
            Endpoint(f"/repos/{full_name}/releases"),
            per_page=per_page or get_settings().sync.release_page_size,
        )

    # -------------------------------------------------------------------------
    # Error Handling
    # -------------------------------------------------------------------------
    def _handle_error(self, response: httpx.Response) -> GitHubClientError:
        """Convert an error response to our custom exceptions."""
        status = response.status_code
        path = response.request.url.path

        if status == 401:
            return GitHubAuthenticationError("Invalid GitHub token")
        elif status == 403:
            headers = response.headers
            if headers.get("x-ratelimit-remaining") == "0":
                reset_ts = int(headers.get("x-ratelimit-reset", "0"))
                reset_at = datetime.fromtimestamp(reset_ts, tz=UTC) if reset_ts else None
                return GitHubRateLimitError("GitHub rate limit exceeded", reset_at=reset_at)
            return GitHubClientError(f"Access forbidden: {path}")
        elif status == 404:
            return GitHubNotFoundError(f"Not found: {path}")
        else:
            return GitHubClientError(f"GitHub API error ({status}) on {path}")
