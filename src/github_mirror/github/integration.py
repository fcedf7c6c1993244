"""Integration lifecycle: connect, disconnect and per-owner read helpers."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from github_mirror.db.models import OWNER_SCOPED_MODELS, Integration, SyncStatus
from github_mirror.db.repositories import (
    CommitRepository,
    ExternalUserRepository,
    IntegrationRepository,
    IssueRepository,
    OrganizationRepository,
    PullRequestRepository,
    ReleaseRepository,
    RepositoryRepository,
    SyncStatusRepository,
)
from github_mirror.logging import bind_owner
from github_mirror.schemas.api import IntegrationStatus, ProfileRead, SummaryRead

if TYPE_CHECKING:
    from github_mirror.github.client import GitHubClient


class IntegrationService:
    """Connects and disconnects GitHub accounts.

    ``connect`` and ``disconnect`` commit their own transaction so the
    change is visible before a sync is started or the session is cleared.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._integrations = IntegrationRepository(session)
        self._users = ExternalUserRepository(session)
        self._status = SyncStatusRepository(session)

    async def connect(
        self,
        client: GitHubClient,
        access_token: str,
        scopes: list[str] | None = None,
    ) -> str:
        """Record an authorization for the token's owner.

        Fetches the owner's profile, creates or refreshes the Integration and
        upserts the owner's own user row.

        Args:
            client: GitHub client authenticated with ``access_token``
            access_token: Token to store for later syncs
            scopes: Scopes GitHub reported as granted

        Returns:
            The owner id (the GitHub user id as a string)
        """
        profile = await client.get_authenticated_user()
        owner_id = str(profile.id)

        _integration, created = await self._integrations.upsert(
            owner_id,
            username=profile.login,
            avatar_url=profile.avatar_url,
            access_token=access_token,
            granted_scopes=scopes or [],
            last_synced_at=datetime.now(UTC),
        )
        await self._users.upsert_many(owner_id, [profile.to_external_user_create()])
        await self._session.commit()

        bind_owner(owner_id).info(
            "{} integration for {}", "Created" if created else "Refreshed", profile.login
        )
        return owner_id

    async def disconnect(self, owner_id: str) -> dict[str, int]:
        """Delete every owner-scoped row, the Integration and the SyncStatus.

        Returns:
            Deleted row counts by table name
        """
        deleted: dict[str, int] = {}
        for model in OWNER_SCOPED_MODELS:
            stmt = delete(model).where(model.owner_id == owner_id)  # type: ignore[attr-defined]
            cursor_result = await self._session.execute(stmt.execution_options(synchronize_session=False))
            deleted[model.__tablename__] = getattr(cursor_result, "rowcount", 0) or 0
        await self._session.commit()

        bind_owner(owner_id).info("Integration removed ({} rows)", sum(deleted.values()))
        return deleted

    # -------------------------------------------------------------------------
    # Read helpers
    # -------------------------------------------------------------------------

    async def get_integration(self, owner_id: str) -> Integration | None:
        return await self._integrations.get_by_owner(owner_id)

    async def status(self, owner_id: str | None) -> IntegrationStatus:
        """Connection status for the (possibly anonymous) caller."""
        integration = await self.get_integration(owner_id) if owner_id else None
        if integration is None:
            return IntegrationStatus(connected=False)
        return IntegrationStatus(
            connected=True,
            username=integration.username,
            last_synced=integration.last_synced_at,
        )

    async def profile(self, owner_id: str) -> ProfileRead | None:
        integration = await self.get_integration(owner_id)
        if integration is None:
            return None
        return ProfileRead(
            github_id=integration.owner_id,
            username=integration.username,
            avatar_url=integration.avatar_url,
            last_synced=integration.last_synced_at,
        )

    async def summary(self, owner_id: str) -> SummaryRead:
        """Row counts of every mirrored collection for the owner."""
        session = self._session
        return SummaryRead(
            organizations=await OrganizationRepository(session).count_for_owner(owner_id),
            repositories=await RepositoryRepository(session).count_for_owner(owner_id),
            commits=await CommitRepository(session).count_for_owner(owner_id),
            pull_requests=await PullRequestRepository(session).count_for_owner(owner_id),
            issues=await IssueRepository(session).count_for_owner(owner_id),
            releases=await ReleaseRepository(session).count_for_owner(owner_id),
        )

    async def sync_status(self, owner_id: str) -> SyncStatus | None:
        return await self._status.get_by_owner(owner_id)
