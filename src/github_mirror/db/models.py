"""SQLAlchemy ORM models for GitHub Mirror.

Every mirrored collection carries ``owner_id``, the identity of the account
whose credential performed the sync. All reads and bulk deletes are
partitioned by it.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, Text, UniqueConstraint, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import JSON


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


# ------------------------------------------------------------------------------
# Integration model
# ------------------------------------------------------------------------------
class Integration(Base):
    """A connected GitHub account and the credential used for upstream calls."""

    __tablename__ = "integrations"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(50), unique=True)
    username: Mapped[str] = mapped_column(String(100))
    avatar_url: Mapped[str] = mapped_column(String(500), default="")
    access_token: Mapped[str] = mapped_column(String(255))
    granted_scopes: Mapped[list[str]] = mapped_column(JSON, default=list)
    last_synced_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<Integration(owner_id='{self.owner_id}', username='{self.username}')>"


# ------------------------------------------------------------------------------
# Organization model
# ------------------------------------------------------------------------------
class Organization(Base):
    """GitHub organization the owner belongs to."""

    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(50), index=True)
    org_id: Mapped[int] = mapped_column()
    login: Mapped[str] = mapped_column(String(100))
    name: Mapped[str] = mapped_column(String(200), default="")
    description: Mapped[str] = mapped_column(Text, default="")
    url: Mapped[str] = mapped_column(String(500), default="")
    public_repo_count: Mapped[int] = mapped_column(default=0)
    member_count: Mapped[int] = mapped_column(default=0)

    __table_args__ = (UniqueConstraint("owner_id", "org_id", name="uq_owner_org"),)

    def __repr__(self) -> str:
        return f"<Organization(owner_id='{self.owner_id}', login='{self.login}')>"


# ------------------------------------------------------------------------------
# ExternalUser model
# ------------------------------------------------------------------------------
class ExternalUser(Base):
    """A GitHub user seen during sync (org members and the owner's own profile).

    Rows are upserted across syncs and only removed on disconnect.
    """

    __tablename__ = "external_users"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(50), index=True)
    external_id: Mapped[int] = mapped_column()
    login: Mapped[str] = mapped_column(String(100))
    name: Mapped[str] = mapped_column(String(200), default="")
    avatar_url: Mapped[str] = mapped_column(String(500), default="")
    url: Mapped[str] = mapped_column(String(500), default="")

    __table_args__ = (UniqueConstraint("owner_id", "external_id", name="uq_owner_external_user"),)

    def __repr__(self) -> str:
        return f"<ExternalUser(owner_id='{self.owner_id}', login='{self.login}')>"


# ------------------------------------------------------------------------------
# Repository model
# ------------------------------------------------------------------------------
class Repository(Base):
    """GitHub repository visible to the owner."""

    __tablename__ = "repositories"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(50), index=True)
    repo_id: Mapped[int] = mapped_column()
    name: Mapped[str] = mapped_column(String(100))
    full_name: Mapped[str] = mapped_column(String(200))  # "acme/widget"
    is_private: Mapped[bool] = mapped_column(default=False)
    url: Mapped[str] = mapped_column(String(500), default="")
    description: Mapped[str] = mapped_column(Text, default="")
    language: Mapped[str | None] = mapped_column(String(100), nullable=True)
    fork_count: Mapped[int] = mapped_column(default=0)
    star_count: Mapped[int] = mapped_column(default=0)
    open_issue_count: Mapped[int] = mapped_column(default=0)

    __table_args__ = (UniqueConstraint("owner_id", "repo_id", name="uq_owner_repo"),)

    def __repr__(self) -> str:
        return f"<Repository(owner_id='{self.owner_id}', full_name='{self.full_name}')>"


# ------------------------------------------------------------------------------
# Per-repository activity models (joined to Repository by full name)
# ------------------------------------------------------------------------------
class Commit(Base):
    """Commit on a repository's default branch."""

    __tablename__ = "commits"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(50), index=True)
    repo_full_name: Mapped[str] = mapped_column(String(200), index=True)
    sha: Mapped[str] = mapped_column(String(40))
    message: Mapped[str] = mapped_column(Text, default="")
    author_name: Mapped[str] = mapped_column(String(200), default="")
    author_login: Mapped[str] = mapped_column(String(100), default="")
    committed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    url: Mapped[str] = mapped_column(String(500), default="")

    __table_args__ = (
        UniqueConstraint("owner_id", "repo_full_name", "sha", name="uq_owner_repo_commit"),
    )

    def __repr__(self) -> str:
        return f"<Commit(repo='{self.repo_full_name}', sha='{self.sha[:7]}')>"


class PullRequest(Base):
    """Pull request on a repository. Merged is inferred from ``merged_at``."""

    __tablename__ = "pull_requests"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(50), index=True)
    repo_full_name: Mapped[str] = mapped_column(String(200), index=True)
    number: Mapped[int] = mapped_column()
    title: Mapped[str] = mapped_column(String(500))
    state: Mapped[str] = mapped_column(String(20))  # "open" | "closed"
    author_login: Mapped[str] = mapped_column(String(100), default="")
    created_at: Mapped[datetime] = mapped_column(DateTime)
    merged_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    url: Mapped[str] = mapped_column(String(500), default="")

    __table_args__ = (
        UniqueConstraint("owner_id", "repo_full_name", "number", name="uq_owner_repo_pull"),
    )

    def __repr__(self) -> str:
        return f"<PullRequest(repo='{self.repo_full_name}', number={self.number})>"

    @property
    def is_merged(self) -> bool:
        """Check if PR was merged."""
        return self.merged_at is not None


class Issue(Base):
    """Issue on a repository (pull requests excluded)."""

    __tablename__ = "issues"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(50), index=True)
    repo_full_name: Mapped[str] = mapped_column(String(200), index=True)
    number: Mapped[int] = mapped_column()
    title: Mapped[str] = mapped_column(String(500))
    state: Mapped[str] = mapped_column(String(20))
    author_login: Mapped[str] = mapped_column(String(100), default="")
    created_at: Mapped[datetime] = mapped_column(DateTime)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    url: Mapped[str] = mapped_column(String(500), default="")

    __table_args__ = (
        UniqueConstraint("owner_id", "repo_full_name", "number", name="uq_owner_repo_issue"),
    )

    def __repr__(self) -> str:
        return f"<Issue(repo='{self.repo_full_name}', number={self.number})>"


class Release(Base):
    """Published release (exposed as "changelogs" on the read API)."""

    __tablename__ = "releases"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(50), index=True)
    repo_full_name: Mapped[str] = mapped_column(String(200), index=True)
    release_id: Mapped[int] = mapped_column()
    tag_name: Mapped[str] = mapped_column(String(200))
    name: Mapped[str] = mapped_column(String(500), default="")
    body: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    published_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    url: Mapped[str] = mapped_column(String(500), default="")

    __table_args__ = (
        UniqueConstraint("owner_id", "repo_full_name", "release_id", name="uq_owner_repo_release"),
    )

    def __repr__(self) -> str:
        return f"<Release(repo='{self.repo_full_name}', tag='{self.tag_name}')>"


# ------------------------------------------------------------------------------
# Sync bookkeeping
# ------------------------------------------------------------------------------
class ForkImport(Base):
    """A repository whose activity the fork import brought in for the owner.

    The account sync keeps these repositories' commits, pull requests and
    issues when it prunes repositories absent from the owner's own list.
    """

    __tablename__ = "fork_imports"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(50), index=True)
    full_name: Mapped[str] = mapped_column(String(200))
    imported_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())

    __table_args__ = (UniqueConstraint("owner_id", "full_name", name="uq_owner_fork_import"),)

    def __repr__(self) -> str:
        return f"<ForkImport(owner_id='{self.owner_id}', full_name='{self.full_name}')>"


class SyncStatus(Base):
    """Per-owner progress record, one flag per stage."""

    __tablename__ = "sync_status"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(50), unique=True)
    users: Mapped[bool] = mapped_column(default=False)
    organizations: Mapped[bool] = mapped_column(default=False)
    repos: Mapped[bool] = mapped_column(default=False)
    commits: Mapped[bool] = mapped_column(default=False)
    pulls: Mapped[bool] = mapped_column(default=False)
    issues: Mapped[bool] = mapped_column(default=False)
    changelogs: Mapped[bool] = mapped_column(default=False)
    all_synced: Mapped[bool] = mapped_column(default=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())

    def __repr__(self) -> str:
        return f"<SyncStatus(owner_id='{self.owner_id}', all_synced={self.all_synced})>"


class SyncLease(Base):
    """Run-ownership token: at most one live sync run per owner."""

    __tablename__ = "sync_leases"

    owner_id: Mapped[str] = mapped_column(String(50), primary_key=True)
    token: Mapped[str] = mapped_column(String(64))
    acquired_at: Mapped[datetime] = mapped_column(DateTime)
    expires_at: Mapped[datetime] = mapped_column(DateTime)

    def __repr__(self) -> str:
        return f"<SyncLease(owner_id='{self.owner_id}', expires_at={self.expires_at})>"


# Models partitioned by owner_id, in deletion order for a disconnect cascade
OWNER_SCOPED_MODELS: tuple[type[Base], ...] = (
    Commit,
    PullRequest,
    Issue,
    Release,
    ForkImport,
    Repository,
    Organization,
    ExternalUser,
    SyncStatus,
    SyncLease,
    Integration,
)
