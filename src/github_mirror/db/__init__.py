"""Database module for GitHub Mirror."""

from github_mirror.db.engine import (
    create_tables,
    dispose_engine,
    drop_tables,
    get_engine,
    get_session,
    get_session_factory,
)
from github_mirror.db.models import (
    OWNER_SCOPED_MODELS,
    Base,
    Commit,
    ExternalUser,
    ForkImport,
    Integration,
    Issue,
    Organization,
    PullRequest,
    Release,
    Repository,
    SyncLease,
    SyncStatus,
)

__all__ = [
    # Models
    "OWNER_SCOPED_MODELS",
    "Base",
    "Commit",
    "ExternalUser",
    "ForkImport",
    "Integration",
    "Issue",
    "Organization",
    "PullRequest",
    "Release",
    "Repository",
    "SyncLease",
    "SyncStatus",
    # Engine
    "create_tables",
    "dispose_engine",
    "drop_tables",
    "get_engine",
    "get_session",
    "get_session_factory",
]
