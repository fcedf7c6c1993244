"""GitHub API client module.

This module provides:
- GitHubClient: Async GitHub REST client for the mirrored collections
- Endpoint, paginate, iter_pages: page-number pagination helpers
- GitHubOAuth: OAuth authorize URL and code exchange
- IntegrationService: connect/disconnect lifecycle
- Sync: AccountSyncOrchestrator, ForkImportOrchestrator, SyncLauncher
"""

from .client import GitHubClient
from .exceptions import (
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubNotFoundError,
    GitHubPayloadError,
    GitHubRateLimitError,
    OAuthExchangeError,
)
from .integration import IntegrationService
from .oauth import GitHubOAuth, OAuthToken
from .pagination import Endpoint, iter_pages, paginate
from .sync import (
    AccountSyncOrchestrator,
    FailurePolicy,
    ForkImportOrchestrator,
    OutputFormat,
    SyncAlreadyRunningError,
    SyncLauncher,
    SyncRunResult,
    SyncStage,
)

__all__ = [
    # Client
    "GitHubClient",
    # Pagination
    "Endpoint",
    "iter_pages",
    "paginate",
    # OAuth / lifecycle
    "GitHubOAuth",
    "IntegrationService",
    "OAuthToken",
    # Exceptions
    "GitHubAuthenticationError",
    "GitHubClientError",
    "GitHubNotFoundError",
    "GitHubPayloadError",
    "GitHubRateLimitError",
    "OAuthExchangeError",
    # Sync
    "AccountSyncOrchestrator",
    "FailurePolicy",
    "ForkImportOrchestrator",
    "OutputFormat",
    "SyncAlreadyRunningError",
    "SyncLauncher",
    "SyncRunResult",
    "SyncStage",
]
