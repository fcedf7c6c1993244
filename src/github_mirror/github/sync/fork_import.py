"""Fork Import Orchestrator - import activity of the repositories an account forked.

Lists the account's forks, resolves each one to its upstream parent,
deduplicates by parent, and imports commits, pull requests and issues of
every distinct parent (capped per type). Each (repository, type) pair is
its own unit of work; the default policy is best-effort. Every imported
repository is recorded so the account sync does not prune its rows.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession

from github_mirror.config import SyncConfig, get_settings
from github_mirror.db.repositories import (
    CommitRepository,
    ForkImportRepository,
    IssueRepository,
    PullRequestRepository,
)
from github_mirror.github.exceptions import GitHubClientError
from github_mirror.logging import bind_owner, get_logger

from .enums import FailurePolicy, SyncStage
from .lease import SyncLeaseLostError, SyncRunLock
from .results import SyncRunResult
from .stages import StageAbortedError, StageTracker

if TYPE_CHECKING:
    from github_mirror.github.client import GitHubClient
    from github_mirror.schemas.github_api import GitHubRepository

logger = get_logger(__name__)

FORK_STAGES = (SyncStage.COMMITS, SyncStage.PULLS, SyncStage.ISSUES)


class ForkImportOrchestrator:
    """Imports upstream activity for every fork an account owns.

    Usage:
        async with GitHubClient(token) as client:
            async with get_session() as session:
                orchestrator = ForkImportOrchestrator(client, session)
                result = await orchestrator.run(owner_id)

    Status semantics:
        The commits/pulls/issues flags are true only if that type imported
        for every resolved repository; ``all_synced`` only if nothing failed.
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
            session: Session used for every unit (committed per unit)
            policy: Failure policy (defaults to ``sync.fork_failure_policy``)
            config: Sync settings (defaults to ``get_settings().sync``)
        """
        self._client = client
        self._session = session
        self._config = config or get_settings().sync
        self._policy = policy or FailurePolicy(self._config.fork_failure_policy)

        self._commits = CommitRepository(session)
        self._pulls = PullRequestRepository(session)
        self._issues = IssueRepository(session)
        self._imports = ForkImportRepository(session)

    async def resolve_parent(self, fork: GitHubRepository) -> str:
        """Resolve a fork to its parent's full name.

        Falls back to the fork itself when its detail record can't be
        fetched or doesn't parse (the client reports both as
        :class:`GitHubClientError`).
        """
        try:
            detail = await self._client.get_repository(fork.full_name)
        except GitHubClientError as e:
            logger.warning("Could not fetch details of {}, using it as-is: {}", fork.full_name, e)
            return fork.full_name

        resolved = detail.resolved_full_name
        if resolved == fork.full_name:
            logger.info("Fork {} has no parent, using it as-is", fork.full_name)
        else:
            logger.info("Fork {} -> parent {}", fork.full_name, resolved)
        return resolved

    async def resolve_targets(self) -> list[str]:
        """List forks and return the distinct repositories to import, in listing order."""
        forks = await self._client.list_forks()
        targets: list[str] = []
        seen: set[str] = set()
        for fork in forks:
            resolved = await self.resolve_parent(fork)
            if resolved in seen:
                logger.debug("Skipping {}: {} already queued", fork.full_name, resolved)
                continue
            seen.add(resolved)
            targets.append(resolved)
        return targets

    async def run(self, owner_id: str) -> SyncRunResult:
        """Import parent activity for ``owner_id`` under the owner's run lease.

        Raises:
            SyncAlreadyRunningError: If another run holds the owner's lease
            GitHubClientError: If the fork listing itself fails
        """
        async with SyncRunLock(self._session, owner_id, self._config.lease_ttl) as lease:
            tracker = StageTracker(
                self._session, owner_id, self._policy, stages=FORK_STAGES, lease=lease
            )
            log = bind_owner(owner_id)
            log.info("Starting fork import (policy={})", self._policy.value)
            try:
                await tracker.start()
                targets = await self.resolve_targets()
                tracker.result.repositories = targets
                log.info("Importing {} distinct repositories", len(targets))

                for full_name in targets:
                    await self._import_repository(tracker, owner_id, full_name)
                for stage in FORK_STAGES:
                    await tracker.publish(stage)
                await tracker.publish_all_synced()
            except (StageAbortedError, SyncLeaseLostError):
                pass
            return tracker.finish()

    async def _import_repository(self, tracker: StageTracker, owner_id: str, full_name: str) -> None:
        """Import commits, pulls and issues of one repository, each as its own unit."""
        config = self._config

        async with tracker.guard(SyncStage.COMMITS, full_name):
            commits = await self._client.list_commits(full_name, max_items=config.fork_max_commits)
            result = await self._commits.upsert_many(
                owner_id, [c.to_commit_create(full_name) for c in commits], scope=full_name
            )
            await self._imports.record(owner_id, full_name)
            self._count(tracker, SyncStage.COMMITS, result.total)

        async with tracker.guard(SyncStage.PULLS, full_name):
            pulls = await self._client.list_pull_requests(full_name, max_items=config.fork_max_pulls)
            result = await self._pulls.upsert_many(
                owner_id, [p.to_pull_request_create(full_name) for p in pulls], scope=full_name
            )
            await self._imports.record(owner_id, full_name)
            self._count(tracker, SyncStage.PULLS, result.total)

        async with tracker.guard(SyncStage.ISSUES, full_name):
            issues = await self._client.list_issues(full_name, max_items=config.fork_max_issues)
            result = await self._issues.upsert_many(
                owner_id, [i.to_issue_create(full_name) for i in issues], scope=full_name
            )
            await self._imports.record(owner_id, full_name)
            self._count(tracker, SyncStage.ISSUES, result.total)

    @staticmethod
    def _count(tracker: StageTracker, stage: SyncStage, items: int) -> None:
        stage_result = tracker.stage(stage)
        stage_result.items += items
        stage_result.repositories += 1
