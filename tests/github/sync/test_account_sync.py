"""Tests for AccountSyncOrchestrator.

Tests cover:
- Full run: every collection stored, every flag set
- Idempotence of back-to-back runs
- Rows absent upstream are removed
- Fail-fast abort and best-effort continuation
- Org member failures and the member page cap
- Flag reset at run start
- Run lease and its renewal
- A run stops once its lease is lost (takeover or disconnect)
"""

from datetime import timedelta

import pytest
from sqlalchemy import select

from github_mirror.config import SyncConfig
from github_mirror.db.models import (
    OWNER_SCOPED_MODELS,
    Commit,
    ExternalUser,
    Issue,
    Organization,
    PullRequest,
    Release,
    Repository,
    SyncLease,
    SyncStatus,
)
from github_mirror.db.repositories import RepositoryRepository
from github_mirror.github.exceptions import GitHubPayloadError
from github_mirror.github.integration import IntegrationService
from github_mirror.github.sync import (
    AccountSyncOrchestrator,
    FailurePolicy,
    StageOutcome,
    SyncAlreadyRunningError,
    SyncLeaseLostError,
    SyncRunLock,
    SyncStage,
)
from tests.conftest import OWNER_ID
from tests.fixtures.github_responses import GITHUB_MEMBER_RESPONSE, commit_payload, repo_payload
from tests.github.sync.helpers import LeaseClock, account_fake, count_rows, load_status, snapshot

STAGE_FLAGS = ("users", "organizations", "repos", "commits", "pulls", "issues", "changelogs")
TTL = timedelta(minutes=60)


async def run_sync(fake, session, *, policy=None, config=None):
    async with fake.client() as client:
        orchestrator = AccountSyncOrchestrator(
            client, session, policy=policy, config=config or SyncConfig()
        )
        return await orchestrator.run(OWNER_ID)


class TestFullRun:
    async def test_stores_every_collection(self, db_session):
        result = await run_sync(account_fake(), db_session)

        assert result.success
        assert await count_rows(db_session, Organization) == 1
        assert await count_rows(db_session, ExternalUser) == 2  # owner + member
        assert await count_rows(db_session, Repository) == 2
        assert await count_rows(db_session, Commit) == 2
        assert await count_rows(db_session, PullRequest) == 1
        assert await count_rows(db_session, Issue) == 2  # pull request entry excluded
        assert await count_rows(db_session, Release) == 1

    async def test_sets_every_flag_and_all_synced(self, db_session):
        result = await run_sync(account_fake(), db_session)

        status = await load_status(db_session, OWNER_ID)
        assert all(getattr(status, flag) for flag in STAGE_FLAGS)
        assert status.all_synced is True
        assert result.all_synced is True

    async def test_rows_carry_owner_and_repository(self, db_session):
        await run_sync(account_fake(), db_session)

        repo = await RepositoryRepository(db_session).get_by_full_name(OWNER_ID, "acme/widget")
        assert repo is not None
        assert repo.owner_id == OWNER_ID

    async def test_stages_run_in_order(self, db_session):
        result = await run_sync(account_fake(), db_session)

        assert list(result.stages) == list(SyncStage)
        assert result.repositories == ["acme/widget", "octocat/tools"]

    async def test_releases_lease(self, db_session):
        await run_sync(account_fake(), db_session)

        assert await count_rows(db_session, SyncLease) == 0


class TestReconciliation:
    async def test_back_to_back_runs_are_idempotent(self, db_session):
        fake = account_fake()

        await run_sync(fake, db_session)
        first = await snapshot(db_session)
        await run_sync(fake, db_session)
        second = await snapshot(db_session)

        assert first == second

    async def test_rows_removed_upstream_are_deleted(self, db_session):
        fake = account_fake()
        await run_sync(fake, db_session)

        fake.lists["/user/repos"] = [repo_payload(1, "acme/widget")]
        fake.lists["/repos/acme/widget/commits"] = fake.lists["/repos/acme/widget/commits"][:1]
        fake.lists["/user/orgs"] = []
        await run_sync(fake, db_session)

        assert await count_rows(db_session, Repository) == 1
        assert await count_rows(db_session, Commit) == 1
        assert await count_rows(db_session, Organization) == 0
        # Users are upserted only
        assert await count_rows(db_session, ExternalUser) == 2

    async def test_vanished_repository_activity_is_pruned(self, db_session):
        fake = account_fake()
        fake.lists["/repos/octocat/tools/commits"] = [commit_payload("c" * 40)]
        await run_sync(fake, db_session)
        assert await count_rows(db_session, Commit) == 3

        fake.lists["/user/repos"] = [repo_payload(1, "acme/widget")]
        await run_sync(fake, db_session)

        assert await count_rows(db_session, Commit) == 2


class TestFailFast:
    async def test_failure_aborts_remaining_stages(self, db_session):
        fake = account_fake()
        fake.fail("/repos/acme/widget/pulls", 500)

        result = await run_sync(fake, db_session, policy=FailurePolicy.FAIL_FAST)

        assert result.aborted is True
        assert result.success is False
        assert result.stages[SyncStage.PULLS].outcome is StageOutcome.FATAL
        assert SyncStage.ISSUES not in result.stages
        status = await load_status(db_session, OWNER_ID)
        assert (status.users, status.organizations, status.repos, status.commits) == (
            True,
            True,
            True,
            True,
        )
        assert (status.pulls, status.issues, status.changelogs) == (False, False, False)
        assert status.all_synced is False
        assert await count_rows(db_session, Issue) == 0
        assert fake.calls["/repos/octocat/tools/pulls"] == 0

    async def test_lease_released_after_abort(self, db_session):
        fake = account_fake()
        fake.fail("/user/repos", 500)

        await run_sync(fake, db_session, policy=FailurePolicy.FAIL_FAST)

        assert await count_rows(db_session, SyncLease) == 0

    async def test_flags_reset_at_run_start(self, db_session):
        db_session.add(
            SyncStatus(owner_id=OWNER_ID, **{flag: True for flag in STAGE_FLAGS}, all_synced=True)
        )
        await db_session.commit()
        fake = account_fake()
        fake.fail("/user/repos", 500)

        await run_sync(fake, db_session, policy=FailurePolicy.FAIL_FAST)

        status = await load_status(db_session, OWNER_ID)
        assert status.users is True
        assert status.organizations is True
        assert status.repos is False
        assert status.commits is False
        assert status.changelogs is False
        assert status.all_synced is False


class TestBestEffort:
    async def test_repository_failure_is_contained(self, db_session):
        fake = account_fake()
        fake.fail("/repos/acme/widget/pulls", 500)

        result = await run_sync(fake, db_session, policy=FailurePolicy.BEST_EFFORT)

        pulls = result.stages[SyncStage.PULLS]
        assert pulls.outcome is StageOutcome.PARTIAL_FAILURE
        assert pulls.failed_repositories == ["acme/widget"]
        assert pulls.repositories == 1

        status = await load_status(db_session, OWNER_ID)
        assert status.pulls is False
        assert status.issues is True
        assert status.changelogs is True
        assert status.all_synced is False
        assert await count_rows(db_session, Issue) == 2

    async def test_failed_repository_keeps_previous_rows(self, db_session):
        fake = account_fake()
        await run_sync(fake, db_session)

        fake.fail("/repos/acme/widget/pulls", 500)
        await run_sync(fake, db_session, policy=FailurePolicy.BEST_EFFORT)

        assert await count_rows(db_session, PullRequest) == 1

    async def test_malformed_listing_keeps_previous_rows(self, db_session):
        fake = account_fake()
        await run_sync(fake, db_session)

        fake.lists["/repos/acme/widget/pulls"] = [{"number": "not-a-number"}]
        result = await run_sync(fake, db_session, policy=FailurePolicy.BEST_EFFORT)

        pulls = result.stages[SyncStage.PULLS]
        assert pulls.failed_repositories == ["acme/widget"]
        assert isinstance(pulls.failures[0].error, GitHubPayloadError)
        assert await count_rows(db_session, PullRequest) == 1
        assert (await load_status(db_session, OWNER_ID)).pulls is False

    async def test_stage_level_failure_is_fatal_for_that_stage(self, db_session):
        fake = account_fake()
        fake.fail("/user/orgs", 500)

        result = await run_sync(fake, db_session, policy=FailurePolicy.BEST_EFFORT)

        assert result.stages[SyncStage.ORGANIZATIONS].outcome is StageOutcome.FATAL
        assert result.aborted is False
        status = await load_status(db_session, OWNER_ID)
        assert status.organizations is False
        assert status.repos is True


class TestOrganizationMembers:
    async def test_member_failure_does_not_fail_stage(self, db_session):
        fake = account_fake()
        fake.fail("/orgs/acme/members", 500)

        result = await run_sync(fake, db_session)

        assert result.success
        status = await load_status(db_session, OWNER_ID)
        assert status.organizations is True
        assert await count_rows(db_session, ExternalUser) == 1

    @pytest.mark.parametrize(("page_limit", "expected_members"), [(1, 100), (0, 150)])
    async def test_member_page_cap(self, db_session, page_limit, expected_members):
        fake = account_fake()
        fake.lists["/orgs/acme/members"] = [
            {**GITHUB_MEMBER_RESPONSE, "id": 5000 + i, "login": f"member{i}"} for i in range(150)
        ]

        await run_sync(fake, db_session, config=SyncConfig(member_page_limit=page_limit))

        assert await count_rows(db_session, ExternalUser) == expected_members + 1


class TestRunLease:
    async def test_concurrent_run_is_rejected(self, db_session, sync_config):
        fake = account_fake()
        async with SyncRunLock(db_session, OWNER_ID, sync_config.lease_ttl):
            with pytest.raises(SyncAlreadyRunningError):
                await run_sync(fake, db_session)

        assert fake.calls["/user"] == 0

    async def test_long_run_keeps_its_lease(self, db_session, session_factory, monkeypatch):
        clock = LeaseClock()
        monkeypatch.setattr("github_mirror.github.sync.lease.datetime", clock)
        rejected: list[SyncAlreadyRunningError] = []

        class SlowCommitsSync(AccountSyncOrchestrator):
            async def _fetch_commits(self, full_name):
                clock.advance(minutes=40)
                async with session_factory() as rival_session:
                    try:
                        await SyncRunLock(rival_session, OWNER_ID, TTL).acquire()
                    except SyncAlreadyRunningError as e:
                        rejected.append(e)
                return await super()._fetch_commits(full_name)

        async with account_fake().client() as client:
            result = await SlowCommitsSync(client, db_session, config=SyncConfig()).run(OWNER_ID)

        # 80 minutes in, past the original hour, the lease is still live
        assert len(rejected) == 2
        assert result.success
        assert result.lease_lost is False

    async def test_lease_taken_over_mid_unit_stops_run(
        self, db_session, session_factory, monkeypatch
    ):
        clock = LeaseClock()
        monkeypatch.setattr("github_mirror.github.sync.lease.datetime", clock)
        rivals: list[SyncRunLock] = []

        class StalledPullsSync(AccountSyncOrchestrator):
            async def _fetch_pulls(self, full_name):
                rows = await super()._fetch_pulls(full_name)
                clock.advance(minutes=61)
                async with session_factory() as rival_session:
                    rival = SyncRunLock(rival_session, OWNER_ID, TTL)
                    await rival.acquire()
                    rivals.append(rival)
                return rows

        async with account_fake().client() as client:
            result = await StalledPullsSync(
                client, db_session, policy=FailurePolicy.BEST_EFFORT, config=SyncConfig()
            ).run(OWNER_ID)

        assert result.lease_lost is True
        assert result.aborted is True
        assert result.all_synced is False
        assert result.stages[SyncStage.PULLS].outcome is StageOutcome.FATAL
        assert isinstance(result.stages[SyncStage.PULLS].fatal_error, SyncLeaseLostError)
        assert SyncStage.ISSUES not in result.stages
        assert result.to_dict()["summary"]["lease_lost"] is True

        assert await count_rows(db_session, PullRequest) == 0
        assert await count_rows(db_session, Commit) == 2
        status = await load_status(db_session, OWNER_ID)
        assert status.pulls is False
        assert status.all_synced is False
        leases = (await db_session.execute(select(SyncLease))).scalars().all()
        assert [lease.token for lease in leases] == [rivals[0].token]

    async def test_disconnect_mid_run_leaves_nothing_behind(self, db_session, session_factory):
        class DisconnectingSync(AccountSyncOrchestrator):
            async def _fetch_pulls(self, full_name):
                rows = await super()._fetch_pulls(full_name)
                async with session_factory() as other_session:
                    await IntegrationService(other_session).disconnect(OWNER_ID)
                return rows

        async with account_fake().client() as client:
            result = await DisconnectingSync(client, db_session, config=SyncConfig()).run(OWNER_ID)

        assert result.lease_lost is True
        assert result.all_synced is False
        for model in OWNER_SCOPED_MODELS:
            assert await count_rows(db_session, model) == 0, model.__tablename__
