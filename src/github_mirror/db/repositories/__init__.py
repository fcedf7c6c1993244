"""Repository pattern implementation for database access.

This module provides repository classes that encapsulate all database
access logic, providing a clean abstraction over SQLAlchemy models.
"""

from .activity import (
    CommitRepository,
    IssueRepository,
    PullRequestRepository,
    ReleaseRepository,
)
from .base import BaseRepository, OwnedRepository, ReconcileResult
from .fork_import import ForkImportRepository
from .integration import IntegrationRepository
from .organization import ExternalUserRepository, OrganizationRepository
from .repository import RepositoryRepository
from .sync_lease import SyncLeaseRepository
from .sync_status import STAGE_FLAGS, SyncStatusRepository

__all__ = [
    "STAGE_FLAGS",
    "BaseRepository",
    "CommitRepository",
    "ExternalUserRepository",
    "ForkImportRepository",
    "IntegrationRepository",
    "IssueRepository",
    "OrganizationRepository",
    "OwnedRepository",
    "PullRequestRepository",
    "ReconcileResult",
    "ReleaseRepository",
    "RepositoryRepository",
    "SyncLeaseRepository",
    "SyncStatusRepository",
]
