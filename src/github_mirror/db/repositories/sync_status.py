"""Repository for SyncStatus model CRUD operations."""

from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from github_mirror.db.models import SyncStatus

from .base import BaseRepository

STAGE_FLAGS = ("users", "organizations", "repos", "commits", "pulls", "issues", "changelogs")


class SyncStatusRepository(BaseRepository[SyncStatus]):
    """Per-owner sync progress record.

    Each write refreshes ``updated_at``. Nothing is committed here.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, SyncStatus)

    async def get_by_owner(self, owner_id: str) -> SyncStatus | None:
        return await self._get_by_field("owner_id", owner_id)

    async def get_or_create(self, owner_id: str) -> SyncStatus:
        """Get the owner's record, creating an all-false one if missing."""
        status = await self.get_by_owner(owner_id)
        if status is None:
            status = self.add(SyncStatus(owner_id=owner_id, updated_at=datetime.now(UTC)))
            for flag in STAGE_FLAGS:
                setattr(status, flag, False)
            status.all_synced = False
            await self.flush()
        return status

    async def set_flag(self, owner_id: str, flag: str, value: bool) -> SyncStatus:
        """Set one stage flag.

        Raises:
            ValueError: If ``flag`` is not a stage flag
        """
        if flag not in STAGE_FLAGS:
            raise ValueError(f"Unknown stage flag: {flag}")
        status = await self.get_or_create(owner_id)
        setattr(status, flag, value)
        status.updated_at = datetime.now(UTC)
        await self.flush()
        return status

    async def set_all_synced(self, owner_id: str, value: bool) -> SyncStatus:
        status = await self.get_or_create(owner_id)
        status.all_synced = value
        status.updated_at = datetime.now(UTC)
        await self.flush()
        return status
