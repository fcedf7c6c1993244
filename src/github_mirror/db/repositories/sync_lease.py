"""Repository for SyncLease model operations."""

from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from github_mirror.db.models import SyncLease

from .base import BaseRepository


class SyncLeaseRepository(BaseRepository[SyncLease]):
    """Per-owner run leases.

    Expiry comparisons are done in SQL; stored datetimes come back naive
    from SQLite and are never compared in Python.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, SyncLease)

    async def get_by_owner(self, owner_id: str) -> SyncLease | None:
        stmt = select(SyncLease).where(SyncLease.owner_id == owner_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def take_over_expired(
        self,
        owner_id: str,
        token: str,
        now: datetime,
        expires_at: datetime,
    ) -> bool:
        """Claim the owner's lease if it exists and has expired.

        Returns:
            True if an expired lease was taken over
        """
        stmt = (
            update(SyncLease)
            .where(SyncLease.owner_id == owner_id, SyncLease.expires_at < now)
            .values(token=token, acquired_at=now, expires_at=expires_at)
            .execution_options(synchronize_session=False)
        )
        cursor_result = await self._session.execute(stmt)
        return (getattr(cursor_result, "rowcount", 0) or 0) == 1

    async def release(self, owner_id: str, token: str) -> bool:
        """Delete the lease only if it still carries ``token``.

        Returns:
            True if the lease was released
        """
        stmt = (
            delete(SyncLease)
            .where(SyncLease.owner_id == owner_id, SyncLease.token == token)
            .execution_options(synchronize_session=False)
        )
        cursor_result = await self._session.execute(stmt)
        return (getattr(cursor_result, "rowcount", 0) or 0) == 1

    async def renew(self, owner_id: str, token: str, expires_at: datetime) -> bool:
        """Move the expiry of the lease carrying ``token`` to ``expires_at``.

        Returns:
            False if the lease was deleted or taken over by another run
        """
        stmt = (
            update(SyncLease)
            .where(SyncLease.owner_id == owner_id, SyncLease.token == token)
            .values(expires_at=expires_at)
            .execution_options(synchronize_session=False)
        )
        cursor_result = await self._session.execute(stmt)
        return (getattr(cursor_result, "rowcount", 0) or 0) == 1
