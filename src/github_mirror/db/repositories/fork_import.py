"""Repository for ForkImport model operations."""

from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from github_mirror.db.models import ForkImport

from .base import BaseRepository


class ForkImportRepository(BaseRepository[ForkImport]):
    """Repositories the fork import has written activity for, per owner."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ForkImport)

    async def record(self, owner_id: str, full_name: str) -> ForkImport:
        """Mark ``full_name`` as imported for the owner (does not commit)."""
        stmt = select(ForkImport).where(
            ForkImport.owner_id == owner_id,
            ForkImport.full_name == full_name,
        )
        entry = (await self._session.execute(stmt)).scalar_one_or_none()
        if entry is None:
            entry = self.add(ForkImport(owner_id=owner_id, full_name=full_name))
        entry.imported_at = datetime.now(UTC)
        await self.flush()
        return entry

    async def list_full_names(self, owner_id: str) -> list[str]:
        stmt = (
            select(ForkImport.full_name)
            .where(ForkImport.owner_id == owner_id)
            .order_by(ForkImport.id)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())
