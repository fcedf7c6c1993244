"""Repository for Repository model CRUD operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from github_mirror.db.models import Repository

from .base import OwnedRepository


class RepositoryRepository(OwnedRepository[Repository]):
    """Repositories visible to the owner.

    ``full_name`` is the join key for every per-repository collection.
    """

    natural_key = ("repo_id",)

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Repository)

    async def get_by_full_name(self, owner_id: str, full_name: str) -> Repository | None:
        """Get a repository by its full name (e.g., 'acme/widget')."""
        stmt = select(Repository).where(
            Repository.owner_id == owner_id,
            Repository.full_name == full_name,
        )
        result = await self._session.execute(stmt)
        return result.scalars().first()

    async def list_full_names(self, owner_id: str) -> list[str]:
        """Get the owner's repository full names in insertion order."""
        stmt = (
            select(Repository.full_name)
            .where(Repository.owner_id == owner_id)
            .order_by(Repository.id)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())
