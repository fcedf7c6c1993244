"""Tests for StageTracker and the run result objects."""

from datetime import timedelta

import pytest
from sqlalchemy import delete

from github_mirror.db.models import Organization, SyncLease, SyncStatus
from github_mirror.github.sync import (
    FailurePolicy,
    StageAbortedError,
    StageOutcome,
    StageTracker,
    SyncLeaseLostError,
    SyncRunLock,
    SyncStage,
)
from tests.conftest import OWNER_ID
from tests.factories import make_organization, make_sync_status
from tests.github.sync.helpers import count_rows, load_status


def tracker_for(session, policy=FailurePolicy.BEST_EFFORT, **kwargs):
    return StageTracker(session, OWNER_ID, policy, **kwargs)


class TestGuard:
    async def test_success_commits_the_unit(self, db_session):
        tracker = tracker_for(db_session)

        async with tracker.guard(SyncStage.ORGANIZATIONS):
            make_organization(db_session)

        await db_session.rollback()
        assert await count_rows(db_session, Organization) == 1
        assert tracker.stage(SyncStage.ORGANIZATIONS).outcome is StageOutcome.SUCCESS

    async def test_failure_rolls_back_the_unit(self, db_session):
        tracker = tracker_for(db_session)

        async with tracker.guard(SyncStage.ORGANIZATIONS):
            make_organization(db_session)
            await db_session.flush()
            raise RuntimeError("boom")

        assert await count_rows(db_session, Organization) == 0

    async def test_best_effort_repository_failure_is_partial(self, db_session):
        tracker = tracker_for(db_session)

        async with tracker.guard(SyncStage.COMMITS, "acme/widget"):
            raise RuntimeError("boom")
        async with tracker.guard(SyncStage.COMMITS, "acme/tools"):
            pass

        stage = tracker.stage(SyncStage.COMMITS)
        assert stage.outcome is StageOutcome.PARTIAL_FAILURE
        assert stage.failed_repositories == ["acme/widget"]
        assert tracker.result.aborted is False

    async def test_best_effort_stage_failure_is_fatal(self, db_session):
        tracker = tracker_for(db_session)

        async with tracker.guard(SyncStage.REPOS):
            raise RuntimeError("boom")

        stage = tracker.stage(SyncStage.REPOS)
        assert stage.outcome is StageOutcome.FATAL
        assert str(stage.fatal_error) == "boom"
        assert tracker.result.aborted is False

    async def test_fail_fast_raises_with_cause(self, db_session):
        tracker = tracker_for(db_session, FailurePolicy.FAIL_FAST)
        error = RuntimeError("boom")

        with pytest.raises(StageAbortedError) as exc_info:
            async with tracker.guard(SyncStage.PULLS, "acme/widget"):
                raise error

        assert exc_info.value.__cause__ is error
        assert exc_info.value.stage is SyncStage.PULLS
        assert exc_info.value.repository == "acme/widget"
        assert "acme/widget" in str(exc_info.value)
        assert tracker.result.aborted is True
        assert tracker.stage(SyncStage.PULLS).outcome is StageOutcome.FATAL


class TestPublishing:
    async def test_start_resets_only_tracked_flags(self, db_session):
        make_sync_status(db_session, users=True, commits=True, pulls=True, all_synced=True)
        await db_session.commit()

        await tracker_for(db_session, stages=(SyncStage.COMMITS,)).start()

        status = await load_status(db_session, OWNER_ID)
        assert status.users is True
        assert status.pulls is True
        assert status.commits is False
        assert status.all_synced is False

    async def test_start_creates_status_row(self, db_session):
        await tracker_for(db_session).start()

        status = await load_status(db_session, OWNER_ID)
        assert status.all_synced is False

    async def test_publish_writes_success(self, db_session):
        tracker = tracker_for(db_session)
        await tracker.start()
        async with tracker.guard(SyncStage.USERS):
            pass

        assert await tracker.publish(SyncStage.USERS) is True
        assert (await load_status(db_session, OWNER_ID)).users is True
        assert tracker.stage(SyncStage.USERS).completed_at is not None

    async def test_publish_writes_false_after_partial_failure(self, db_session):
        tracker = tracker_for(db_session)
        await tracker.start()
        async with tracker.guard(SyncStage.ISSUES, "acme/widget"):
            raise RuntimeError("boom")

        assert await tracker.publish(SyncStage.ISSUES) is False
        assert (await load_status(db_session, OWNER_ID)).issues is False

    async def test_all_synced_requires_every_tracked_stage(self, db_session):
        tracker = tracker_for(db_session, stages=(SyncStage.USERS, SyncStage.REPOS))
        await tracker.start()
        async with tracker.guard(SyncStage.USERS):
            pass
        await tracker.publish(SyncStage.USERS)

        assert await tracker.publish_all_synced() is False

        async with tracker.guard(SyncStage.REPOS):
            pass
        await tracker.publish(SyncStage.REPOS)

        assert await tracker.publish_all_synced() is True
        assert (await load_status(db_session, OWNER_ID)).all_synced is True
        assert tracker.result.all_synced is True

    async def test_all_synced_false_after_abort(self, db_session):
        tracker = tracker_for(db_session, FailurePolicy.FAIL_FAST, stages=(SyncStage.USERS,))
        await tracker.start()
        async with tracker.guard(SyncStage.USERS):
            pass
        await tracker.publish(SyncStage.USERS)
        tracker.result.aborted = True

        assert await tracker.publish_all_synced() is False


class TestLeaseRenewal:
    @pytest.fixture
    async def lease(self, db_session):
        lock = SyncRunLock(db_session, OWNER_ID, timedelta(minutes=60))
        await lock.acquire()
        return lock

    async def drop_lease(self, session):
        await session.execute(delete(SyncLease).where(SyncLease.owner_id == OWNER_ID))
        await session.commit()

    async def test_lost_lease_stops_best_effort_unit(self, db_session, lease):
        tracker = tracker_for(db_session, lease=lease)
        await self.drop_lease(db_session)

        with pytest.raises(SyncLeaseLostError):
            async with tracker.guard(SyncStage.ORGANIZATIONS):
                make_organization(db_session)

        assert await count_rows(db_session, Organization) == 0
        assert tracker.result.aborted is True
        assert tracker.result.lease_lost is True
        assert tracker.stage(SyncStage.ORGANIZATIONS).outcome is StageOutcome.FATAL

    async def test_publish_without_lease_writes_no_status(self, db_session, lease):
        tracker = tracker_for(db_session, lease=lease)
        async with tracker.guard(SyncStage.USERS):
            pass
        await self.drop_lease(db_session)

        with pytest.raises(SyncLeaseLostError):
            await tracker.publish(SyncStage.USERS)

        assert await count_rows(db_session, SyncStatus) == 0

    async def test_held_lease_is_renewed_on_commit(self, db_session, lease):
        tracker = tracker_for(db_session, lease=lease)
        db_session.expire_all()
        before = (await db_session.get(SyncLease, OWNER_ID)).expires_at

        async with tracker.guard(SyncStage.USERS):
            pass

        db_session.expire_all()
        assert (await db_session.get(SyncLease, OWNER_ID)).expires_at > before


class TestRunResult:
    async def test_to_dict(self, db_session):
        tracker = tracker_for(db_session)
        async with tracker.guard(SyncStage.REPOS):
            tracker.stage(SyncStage.REPOS).items += 3
        async with tracker.guard(SyncStage.COMMITS, "acme/widget"):
            raise ValueError("bad payload")
        tracker.result.repositories = ["acme/widget"]

        data = tracker.finish().to_dict()

        summary = data["summary"]
        assert summary["owner_id"] == OWNER_ID
        assert summary["policy"] == "best_effort"
        assert summary["success"] is False
        assert summary["total_repos"] == 1
        assert summary["stages_succeeded"] == ["repos"]
        assert summary["stages_failed"] == ["commits"]
        assert summary["total_failures"] == 1

        repos, commits = data["stages"]
        assert repos["items"] == 3
        assert repos["outcome"] == "success"
        assert "failures" not in repos
        assert commits["outcome"] == "partial_failure"
        assert commits["failures"] == [
            {
                "stage": "commits",
                "repository": "acme/widget",
                "error": "bad payload",
                "error_type": "ValueError",
            }
        ]
