"""GitHub client exceptions."""

from datetime import datetime


class GitHubClientError(Exception):
    """Base exception for GitHub client errors."""

    pass


class GitHubAuthenticationError(GitHubClientError):
    """Raised when authentication fails (401) or no token is available."""

    pass


class GitHubRateLimitError(GitHubClientError):
    """Raised when rate limit is exceeded (403 with rate limit headers).

    Detection only: the caller's stage fails like any other upstream error.
    """

    def __init__(self, message: str, reset_at: datetime | None = None) -> None:
        super().__init__(message)
        self.reset_at = reset_at


class GitHubNotFoundError(GitHubClientError):
    """Raised when a resource is not found (404)."""

    pass


class OAuthExchangeError(GitHubClientError):
    """Raised when an authorization code cannot be exchanged for a token."""

    pass


class GitHubPayloadError(GitHubClientError):
    """Raised when a response body doesn't fit the expected payload model.

    A listing with any malformed entry fails as a whole, so a sync never
    reconciles against a partial snapshot.
    """

    pass
