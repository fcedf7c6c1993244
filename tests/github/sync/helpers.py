"""Shared builders for sync tests."""

from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from github_mirror.db.models import (
    Commit,
    ExternalUser,
    Issue,
    Organization,
    PullRequest,
    Release,
    Repository,
    SyncStatus,
)
from tests.fixtures.fake_github import FakeGitHub
from tests.fixtures.github_responses import (
    GITHUB_AUTHENTICATED_USER_RESPONSE,
    GITHUB_MEMBER_RESPONSE,
    GITHUB_ORG_RESPONSE,
    commit_payload,
    issue_payload,
    pull_payload,
    release_payload,
    repo_payload,
)

MIRRORED_MODELS = (Organization, ExternalUser, Repository, Commit, PullRequest, Issue, Release)


def account_fake() -> FakeGitHub:
    """A small account: one org with one member, two repositories.

    acme/widget has 2 commits, 1 pull request, 3 issue-listing entries
    (one of them a pull request) and 1 release; octocat/tools is empty.
    """
    fake = FakeGitHub()
    fake.objects["/user"] = GITHUB_AUTHENTICATED_USER_RESPONSE
    fake.lists["/user/orgs"] = [GITHUB_ORG_RESPONSE]
    fake.lists["/orgs/acme/members"] = [GITHUB_MEMBER_RESPONSE]
    fake.lists["/user/repos"] = [repo_payload(1, "acme/widget"), repo_payload(2, "octocat/tools")]

    fake.lists["/repos/acme/widget/commits"] = [commit_payload("a" * 40), commit_payload("b" * 40)]
    fake.lists["/repos/acme/widget/pulls"] = [pull_payload(10, state="closed", merged=True)]
    fake.lists["/repos/acme/widget/issues"] = [
        issue_payload(1),
        issue_payload(10, pull_request=True),
        issue_payload(2),
    ]
    fake.lists["/repos/acme/widget/releases"] = [release_payload(77, "v1.0.0")]

    for kind in ("commits", "pulls", "issues", "releases"):
        fake.lists[f"/repos/octocat/tools/{kind}"] = []
    return fake


async def count_rows(session: AsyncSession, model: Any) -> int:
    result = await session.execute(select(model))
    return len(result.scalars().all())


async def snapshot(session: AsyncSession) -> dict[str, list[tuple[Any, ...]]]:
    """Every mirrored row as a tuple of its non-id columns, per table."""
    tables: dict[str, list[tuple[Any, ...]]] = {}
    for model in MIRRORED_MODELS:
        table = model.__table__
        columns = [c for c in table.columns if c.key != "id"]
        result = await session.execute(select(*columns).order_by(table.c.id))
        tables[table.name] = [tuple(row) for row in result.all()]
    return tables


async def load_status(session: AsyncSession, owner_id: str) -> SyncStatus:
    session.expire_all()
    result = await session.execute(select(SyncStatus).where(SyncStatus.owner_id == owner_id))
    return result.scalar_one()


class LeaseClock:
    """Replaces ``datetime`` in the lease module so a test can move time forward.

    Usage:
        clock = LeaseClock()
        monkeypatch.setattr("github_mirror.github.sync.lease.datetime", clock)
        clock.advance(minutes=61)
    """

    def __init__(self) -> None:
        self.current = datetime.now(UTC)

    def now(self, tz: Any = None) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)
