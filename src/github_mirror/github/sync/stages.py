"""Stage bookkeeping shared by the account sync and the fork import.

A run is a sequence of stages; each stage is made of units of work (the
whole stage, or one repository within it). :class:`StageTracker` wraps
every unit in its own transaction, records failures on the run result,
applies the run's :class:`FailurePolicy`, and publishes stage flags to
SyncStatus.

When the tracker holds the run's lease, every commit also renews it. A
lease that was deleted (disconnect) or taken over stops the run under
either policy, and the unit's uncommitted writes are discarded.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession

from github_mirror.db.repositories import SyncStatusRepository
from github_mirror.logging import bind_owner, bind_repo

from .enums import FailurePolicy, SyncStage
from .lease import SyncLeaseLostError
from .results import StageResult, SyncRunResult, UnitFailure

if TYPE_CHECKING:
    from .lease import SyncRunLock


class StageAbortedError(Exception):
    """Raised out of a unit under fail-fast; carries the original error as __cause__."""

    def __init__(self, stage: SyncStage, repository: str | None) -> None:
        where = f" ({repository})" if repository else ""
        super().__init__(f"Stage '{stage.value}'{where} failed; run aborted")
        self.stage = stage
        self.repository = repository


class StageTracker:
    """Runs units of work under a failure policy and publishes stage flags.

    Usage:
        async with SyncRunLock(session, owner_id, ttl) as lease:
            tracker = StageTracker(session, owner_id, FailurePolicy.FAIL_FAST, lease=lease)
            await tracker.start()

            async with tracker.guard(SyncStage.REPOS):
                ...  # fetch + reconcile
            await tracker.publish(SyncStage.REPOS)

            await tracker.publish_all_synced()
    """

    def __init__(
        self,
        session: AsyncSession,
        owner_id: str,
        policy: FailurePolicy,
        stages: Iterable[SyncStage] = tuple(SyncStage),
        *,
        lease: SyncRunLock | None = None,
    ) -> None:
        """Initialize the tracker.

        Args:
            session: Session shared by every unit of the run
            owner_id: Owner being synced
            policy: Failure policy for the run
            stages: Stages this run is responsible for (flags reset and
                    considered for ``all_synced``)
            lease: The run's lease, renewed in every transaction the
                   tracker commits
        """
        self._session = session
        self._owner_id = owner_id
        self._policy = policy
        self._stages = tuple(stages)
        self._lease = lease
        self._status_repo = SyncStatusRepository(session)
        self._logger = bind_owner(owner_id)
        self.result = SyncRunResult(owner_id=owner_id, policy=policy)

    @property
    def policy(self) -> FailurePolicy:
        return self._policy

    def stage(self, stage: SyncStage) -> StageResult:
        """Get (or open) the result entry for a stage."""
        if stage not in self.result.stages:
            self.result.stages[stage] = StageResult(stage=stage)
            self._logger.info("Stage '{}' started", stage.value)
        return self.result.stages[stage]

    async def _commit(self, stage: SyncStage | None, repository: str | None = None) -> None:
        """Renew the lease in the open transaction, then commit it.

        Raises:
            SyncLeaseLostError: After rolling back, if the lease is gone
        """
        if self._lease is not None:
            try:
                await self._lease.renew()
            except SyncLeaseLostError as e:
                await self._session.rollback()
                self._lose_lease(e, stage, repository)
                raise
        await self._session.commit()

    def _lose_lease(
        self, error: SyncLeaseLostError, stage: SyncStage | None, repository: str | None
    ) -> None:
        if stage is not None:
            stage_result = self.stage(stage)
            stage_result.failures.append(UnitFailure(stage=stage, repository=repository, error=error))
            stage_result.fatal_error = error
            stage_result.completed_at = datetime.now(UTC)
        self.result.aborted = True
        self.result.lease_lost = True
        self._logger.error("{}", error)

    async def start(self) -> None:
        """Reset this run's stage flags and ``all_synced`` to false."""
        status = await self._status_repo.get_or_create(self._owner_id)
        for stage in self._stages:
            setattr(status, stage.value, False)
        status.all_synced = False
        status.updated_at = datetime.now(UTC)
        await self._commit(None)

    @asynccontextmanager
    async def guard(self, stage: SyncStage, repository: str | None = None) -> AsyncIterator[None]:
        """Run one unit of work in its own transaction.

        On success the unit is committed. On failure it is rolled back and
        recorded; under fail-fast :class:`StageAbortedError` is raised,
        under best-effort the error is contained. A lost lease raises
        :class:`SyncLeaseLostError` under either policy.

        Args:
            stage: Stage the unit belongs to
            repository: Repository full name for per-repository units
        """
        stage_result = self.stage(stage)
        try:
            yield
            await self._commit(stage, repository)
        except SyncLeaseLostError:
            raise
        except Exception as e:
            await self._session.rollback()
            stage_result.failures.append(UnitFailure(stage=stage, repository=repository, error=e))

            log = bind_repo(self._owner_id, repository) if repository else self._logger
            log.opt(exception=e).error("Stage '{}' failed: {}", stage.value, e)

            if self._policy is FailurePolicy.FAIL_FAST:
                stage_result.fatal_error = e
                stage_result.completed_at = datetime.now(UTC)
                self.result.aborted = True
                raise StageAbortedError(stage, repository) from e
            if repository is None:
                stage_result.fatal_error = e

    async def publish(self, stage: SyncStage) -> bool:
        """Write the stage flag: true only if the stage fully succeeded.

        Returns:
            The flag value written

        Raises:
            SyncLeaseLostError: If the lease is gone; no flag is written
        """
        stage_result = self.stage(stage)
        stage_result.completed_at = datetime.now(UTC)
        succeeded = stage_result.succeeded

        await self._status_repo.set_flag(self._owner_id, stage.value, succeeded)
        await self._commit(stage)

        self._logger.info(
            "Stage '{}' finished: {} ({} items, {:.2f}s)",
            stage.value,
            stage_result.outcome.value,
            stage_result.items,
            stage_result.duration_seconds,
        )
        return succeeded

    async def publish_all_synced(self) -> bool:
        """Set ``all_synced`` if every stage of this run succeeded.

        Returns:
            The value written
        """
        all_synced = not self.result.aborted and all(
            stage in self.result.stages and self.result.stages[stage].succeeded
            for stage in self._stages
        )
        await self._status_repo.set_all_synced(self._owner_id, all_synced)
        await self._commit(None)

        self.result.all_synced = all_synced
        self.result.completed_at = datetime.now(UTC)
        return all_synced

    def finish(self) -> SyncRunResult:
        """Close out the run result and log a summary."""
        if self.result.completed_at is None:
            self.result.completed_at = datetime.now(UTC)
        self._logger.info(
            "Sync finished: all_synced={}, aborted={}, failures={}, {:.2f}s",
            self.result.all_synced,
            self.result.aborted,
            len(self.result.failures),
            self.result.duration_seconds,
        )
        return self.result
