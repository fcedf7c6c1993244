"""Account Sync Orchestrator - mirror everything an account can see.

Runs the fixed stage sequence

    users -> organizations -> repos -> commits -> pulls -> issues -> changelogs

for one owner, reconciling each collection against the stored rows and
publishing a SyncStatus flag after every stage. Stages run strictly in
order and, within the per-repository stages, repositories are processed
one at a time.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from github_mirror.config import SyncConfig, get_settings
from github_mirror.db.repositories import (
    CommitRepository,
    ExternalUserRepository,
    ForkImportRepository,
    IssueRepository,
    OrganizationRepository,
    OwnedRepository,
    PullRequestRepository,
    ReleaseRepository,
    RepositoryRepository,
)
from github_mirror.github.exceptions import GitHubClientError
from github_mirror.logging import bind_owner

from .enums import FailurePolicy, SyncStage
from .fork_import import FORK_STAGES
from .lease import SyncLeaseLostError, SyncRunLock
from .results import SyncRunResult
from .stages import StageAbortedError, StageTracker

if TYPE_CHECKING:
    from github_mirror.github.client import GitHubClient

RowFetcher = Callable[[str], Awaitable[Sequence[BaseModel]]]


class AccountSyncOrchestrator:
    """Fully resynchronizes one owner's mirrored collections.

    Usage:
        async with GitHubClient(integration.access_token) as client:
            async with get_session() as session:
                orchestrator = AccountSyncOrchestrator(client, session)
                result = await orchestrator.run(owner_id)
    """

    def __init__(
        self,
        client: GitHubClient,
        session: AsyncSession,
        *,
        policy: FailurePolicy | None = None,
        config: SyncConfig | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            client: GitHub API client authenticated as the owner
            session: Session used for every stage (committed per unit)
            policy: Failure policy (defaults to ``sync.failure_policy``)
            config: Sync settings (defaults to ``get_settings().sync``)
        """
        self._client = client
        self._session = session
        self._config = config or get_settings().sync
        self._policy = policy or FailurePolicy(self._config.failure_policy)

        self._users = ExternalUserRepository(session)
        self._organizations = OrganizationRepository(session)
        self._repositories = RepositoryRepository(session)
        self._fork_imports = ForkImportRepository(session)
        self._activity: dict[SyncStage, tuple[OwnedRepository, RowFetcher]] = {  # type: ignore[type-arg]
            SyncStage.COMMITS: (CommitRepository(session), self._fetch_commits),
            SyncStage.PULLS: (PullRequestRepository(session), self._fetch_pulls),
            SyncStage.ISSUES: (IssueRepository(session), self._fetch_issues),
            SyncStage.CHANGELOGS: (ReleaseRepository(session), self._fetch_releases),
        }

    async def run(self, owner_id: str) -> SyncRunResult:
        """Run every stage for ``owner_id`` under the owner's run lease.

        Failures inside a stage are recorded on the result (and abort the
        run under fail-fast); they are not raised.

        Raises:
            SyncAlreadyRunningError: If another run holds the owner's lease
        """
        async with SyncRunLock(self._session, owner_id, self._config.lease_ttl) as lease:
            tracker = StageTracker(self._session, owner_id, self._policy, lease=lease)
            bind_owner(owner_id).info("Starting account sync (policy={})", self._policy.value)
            try:
                await tracker.start()
                await self._sync_users(tracker, owner_id)
                await self._sync_organizations(tracker, owner_id)
                await self._sync_repositories(tracker, owner_id)
                for stage in self._activity:
                    await self._sync_activity(tracker, owner_id, stage)
                await tracker.publish_all_synced()
            except (StageAbortedError, SyncLeaseLostError):
                # Recorded and logged by the tracker; remaining stages are skipped
                pass
            return tracker.finish()

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    async def _sync_users(self, tracker: StageTracker, owner_id: str) -> None:
        """Refresh the owner's own profile in the user collection."""
        async with tracker.guard(SyncStage.USERS):
            profile = await self._client.get_authenticated_user()
            result = await self._users.upsert_many(owner_id, [profile.to_external_user_create()])
            tracker.stage(SyncStage.USERS).items += result.total
        await tracker.publish(SyncStage.USERS)

    async def _sync_organizations(self, tracker: StageTracker, owner_id: str) -> None:
        """Reconcile organizations and upsert the members of each one."""
        stage = SyncStage.ORGANIZATIONS
        async with tracker.guard(stage):
            orgs = await self._client.list_organizations()
            result = await self._organizations.reconcile(
                owner_id, [org.to_organization_create() for org in orgs]
            )
            tracker.stage(stage).items += result.total

            max_pages = self._config.member_page_limit or None
            for org in orgs:
                try:
                    members = await self._client.list_org_members(org.login, max_pages=max_pages)
                except GitHubClientError as e:
                    # Member lists are best-effort and never fail the stage
                    bind_owner(owner_id).warning("Could not fetch members of {}: {}", org.login, e)
                    continue
                await self._users.upsert_many(
                    owner_id, [member.to_external_user_create() for member in members]
                )
        await tracker.publish(stage)

    async def _sync_repositories(self, tracker: StageTracker, owner_id: str) -> None:
        stage = SyncStage.REPOS
        async with tracker.guard(stage):
            repos = await self._client.list_repositories()
            result = await self._repositories.reconcile(
                owner_id, [repo.to_repository_create() for repo in repos]
            )
            tracker.stage(stage).items += result.total
        await tracker.publish(stage)

    async def _sync_activity(self, tracker: StageTracker, owner_id: str, stage: SyncStage) -> None:
        """Reconcile one per-repository collection across every stored repository.

        Each repository is its own unit of work. Rows of repositories no
        longer in the repository list are pruned once the loop finishes,
        except the activity the fork import brought in for its targets.
        """
        repository, fetch_rows = self._activity[stage]
        full_names = await self._repositories.list_full_names(owner_id)
        tracker.result.repositories = full_names
        stage_result = tracker.stage(stage)

        for full_name in full_names:
            async with tracker.guard(stage, full_name):
                rows = await fetch_rows(full_name)
                result = await repository.reconcile(owner_id, rows, scope=full_name)
                stage_result.items += result.total
                stage_result.repositories += 1

        async with tracker.guard(stage):
            keep = list(full_names)
            if stage in FORK_STAGES:
                keep += await self._fork_imports.list_full_names(owner_id)
            await repository.prune_repositories(owner_id, keep)
        await tracker.publish(stage)

    # -------------------------------------------------------------------------
    # Row fetchers
    # -------------------------------------------------------------------------

    async def _fetch_commits(self, full_name: str) -> Sequence[BaseModel]:
        commits = await self._client.list_commits(full_name)
        return [commit.to_commit_create(full_name) for commit in commits]

    async def _fetch_pulls(self, full_name: str) -> Sequence[BaseModel]:
        pulls = await self._client.list_pull_requests(full_name)
        return [pull.to_pull_request_create(full_name) for pull in pulls]

    async def _fetch_issues(self, full_name: str) -> Sequence[BaseModel]:
        issues = await self._client.list_issues(full_name)
        return [issue.to_issue_create(full_name) for issue in issues]

    async def _fetch_releases(self, full_name: str) -> Sequence[BaseModel]:
        releases = await self._client.list_releases(full_name)
        return [release.to_release_create(full_name) for release in releases]
