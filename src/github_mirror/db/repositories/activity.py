"""Repositories for per-repository activity: commits, pulls, issues, releases.

Rows are scoped by ``repo_full_name`` so a sync reconciles one repository
at a time and prunes repositories that disappeared afterwards.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from github_mirror.db.models import Commit, Issue, PullRequest, Release

from .base import OwnedRepository


class CommitRepository(OwnedRepository[Commit]):
    natural_key = ("repo_full_name", "sha")
    scope_field = "repo_full_name"
    recency_field = "committed_at"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Commit)


class PullRequestRepository(OwnedRepository[PullRequest]):
    natural_key = ("repo_full_name", "number")
    scope_field = "repo_full_name"
    recency_field = "created_at"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, PullRequest)


class IssueRepository(OwnedRepository[Issue]):
    natural_key = ("repo_full_name", "number")
    scope_field = "repo_full_name"
    recency_field = "created_at"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Issue)


class ReleaseRepository(OwnedRepository[Release]):
    """Releases, exposed on the read API as "changelogs"."""

    natural_key = ("repo_full_name", "release_id")
    scope_field = "repo_full_name"
    recency_field = "published_at"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Release)
