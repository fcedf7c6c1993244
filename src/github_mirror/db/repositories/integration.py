"""Repository for Integration model CRUD operations."""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from github_mirror.db.models import Integration

from .base import BaseRepository


class IntegrationRepository(BaseRepository[Integration]):
    """Connected accounts, one per owner."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Integration)

    async def get_by_owner(self, owner_id: str) -> Integration | None:
        """Get the integration for an owner, if connected."""
        return await self._get_by_field("owner_id", owner_id)

    async def upsert(
        self,
        owner_id: str,
        *,
        username: str,
        avatar_url: str,
        access_token: str,
        granted_scopes: list[str],
        last_synced_at: datetime | None,
    ) -> tuple[Integration, bool]:
        """Create the integration or refresh it on re-authorization.

        Returns:
            Tuple of (Integration, created) where created=True if new
        """
        integration = await self.get_by_owner(owner_id)
        created = integration is None
        if integration is None:
            integration = self.add(
                Integration(owner_id=owner_id, username=username, access_token=access_token)
            )

        integration.username = username
        integration.avatar_url = avatar_url
        integration.access_token = access_token
        integration.granted_scopes = granted_scopes
        integration.last_synced_at = last_synced_at

        await self.flush()
        return integration, created
