"""Base repository pattern implementation for async SQLAlchemy.

Provides common session handling and CRUD operations shared across all
repositories, plus the owner-scoped reconciliation used by the sync.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import String, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from github_mirror.db.models import Base

# Generic type variable for model classes
ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Base repository with common async session handling.

    All repositories should inherit from this class to get
    consistent session management and common query patterns.

    Usage:
        class IntegrationRepository(BaseRepository[Integration]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, Integration)

            async def get_by_owner(self, owner_id: str) -> Integration | None:
                return await self._get_by_field("owner_id", owner_id)
    """

    def __init__(self, session: AsyncSession, model_class: type[ModelT]) -> None:
        """Initialize the repository with a session.

        Args:
            session: Async SQLAlchemy session (caller manages lifecycle)
            model_class: The SQLAlchemy model class this repository manages
        """
        self._session = session
        self._model_class = model_class

    @property
    def session(self) -> AsyncSession:
        """Access the underlying session."""
        return self._session

    # -------------------------------------------------------------------------
    # Common Read Operations
    # -------------------------------------------------------------------------

    async def get_by_id(self, id: int) -> ModelT | None:
        """Get an entity by its primary key ID."""
        return await self._session.get(self._model_class, id)

    async def _get_by_field(self, field_name: str, value: object) -> ModelT | None:
        """Get an entity by a specific field value.

        Args:
            field_name: Name of the model field
            value: Value to match

        Returns:
            First matching entity or None
        """
        stmt = select(self._model_class).where(getattr(self._model_class, field_name) == value)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    # -------------------------------------------------------------------------
    # Common Write Operations
    # -------------------------------------------------------------------------

    def add(self, entity: ModelT) -> ModelT:
        """Add an entity to the session (does not flush).

        The entity will be persisted when the session commits or flushes.

        Args:
            entity: Entity to add

        Returns:
            The same entity (for chaining)
        """
        self._session.add(entity)
        return entity

    async def flush(self) -> None:
        """Flush pending changes to the database.

        This executes SQL but does not commit the transaction.
        """
        await self._session.flush()

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    async def count(self) -> int:
        """Count total entities of this type."""
        stmt = select(func.count()).select_from(self._model_class)
        result = await self._session.execute(stmt)
        return result.scalar() or 0


@dataclass
class ReconcileResult:
    """Row counts produced by one reconcile or upsert pass."""

    created: int = 0
    updated: int = 0
    deleted: int = 0

    @property
    def total(self) -> int:
        """Rows present in the snapshot (created + updated)."""
        return self.created + self.updated


class OwnedRepository(BaseRepository[ModelT]):
    """Repository for a collection partitioned by ``owner_id``.

    Subclasses declare the natural key (excluding ``owner_id``) and, for
    per-repository collections, the scope column and recency column.

    Reconciliation upserts each snapshot row by natural key and deletes
    the owner's rows (within the scope) whose key is absent from the
    snapshot. Nothing is committed here; the caller owns the transaction.
    """

    natural_key: ClassVar[tuple[str, ...]] = ()
    scope_field: ClassVar[str | None] = None
    recency_field: ClassVar[str | None] = None

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def list_for_owner(self, owner_id: str) -> list[ModelT]:
        """Get every row for an owner in insertion order."""
        model = self._model_class
        stmt = select(model).where(model.owner_id == owner_id).order_by(model.id)  # type: ignore[attr-defined]
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_repo(self, owner_id: str, repo_full_name: str) -> list[ModelT]:
        """Get the rows of one repository, most recent first."""
        if self.scope_field is None or self.recency_field is None:
            raise TypeError(f"{type(self).__name__} is not scoped by repository")
        model = self._model_class
        stmt = (
            select(model)
            .where(
                model.owner_id == owner_id,  # type: ignore[attr-defined]
                getattr(model, self.scope_field) == repo_full_name,
            )
            .order_by(getattr(model, self.recency_field).desc(), model.id)  # type: ignore[attr-defined]
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def count_for_owner(self, owner_id: str) -> int:
        """Count the owner's rows."""
        model = self._model_class
        stmt = select(func.count()).select_from(model).where(model.owner_id == owner_id)  # type: ignore[attr-defined]
        result = await self._session.execute(stmt)
        return result.scalar() or 0

    def _search_columns(self) -> list[Any]:
        """String-typed columns matched by free-text search."""
        return [
            column
            for column in self._model_class.__table__.columns
            if isinstance(column.type, String) and column.key != "owner_id"
        ]

    async def search(
        self,
        owner_id: str,
        term: str | None = None,
        page: int = 1,
        limit: int = 50,
    ) -> tuple[list[ModelT], int]:
        """Page through the owner's rows, optionally filtered by a search term.

        The term matches as a case-insensitive substring of any string column.

        Args:
            owner_id: Owner partition
            term: Optional free-text filter
            page: 1-based page number
            limit: Page size

        Returns:
            Tuple of (rows on the page, total matching rows)
        """
        model = self._model_class
        conditions = [model.owner_id == owner_id]  # type: ignore[attr-defined]
        if term:
            conditions.append(
                or_(*(column.icontains(term, autoescape=True) for column in self._search_columns()))
            )

        count_stmt = select(func.count()).select_from(model).where(*conditions)
        total = (await self._session.execute(count_stmt)).scalar() or 0

        stmt = (
            select(model)
            .where(*conditions)
            .order_by(model.id)  # type: ignore[attr-defined]
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all()), total

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def reconcile(
        self,
        owner_id: str,
        rows: Iterable[BaseModel],
        scope: str | None = None,
    ) -> ReconcileResult:
        """Bring the owner's rows in line with a fresh snapshot.

        Args:
            owner_id: Owner partition
            rows: Snapshot rows (``*Create`` schemas)
            scope: Value of ``scope_field`` limiting which rows may be deleted

        Returns:
            ReconcileResult with created/updated/deleted counts
        """
        return await self._apply(owner_id, rows, scope, prune=True)

    async def upsert_many(
        self,
        owner_id: str,
        rows: Iterable[BaseModel],
        scope: str | None = None,
    ) -> ReconcileResult:
        """Upsert rows by natural key without deleting anything."""
        return await self._apply(owner_id, rows, scope, prune=False)

    async def prune_repositories(self, owner_id: str, keep: Collection[str]) -> int:
        """Delete the owner's rows belonging to repositories not in ``keep``.

        Returns:
            Number of deleted rows
        """
        if self.scope_field is None:
            raise TypeError(f"{type(self).__name__} is not scoped by repository")
        model = self._model_class
        stmt = delete(model).where(
            model.owner_id == owner_id,  # type: ignore[attr-defined]
            getattr(model, self.scope_field).not_in(list(keep)),
        ).execution_options(synchronize_session="fetch")
        cursor_result = await self._session.execute(stmt)
        row_count: int = getattr(cursor_result, "rowcount", 0) or 0
        return row_count

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _key_of(self, values: dict[str, Any] | ModelT) -> tuple[Any, ...]:
        if isinstance(values, dict):
            return tuple(values[field] for field in self.natural_key)
        return tuple(getattr(values, field) for field in self.natural_key)

    async def _load_existing(
        self, owner_id: str, scope: str | None
    ) -> dict[tuple[Any, ...], ModelT]:
        model = self._model_class
        stmt = select(model).where(model.owner_id == owner_id)  # type: ignore[attr-defined]
        if scope is not None and self.scope_field is not None:
            stmt = stmt.where(getattr(model, self.scope_field) == scope)
        result = await self._session.execute(stmt)
        return {self._key_of(entity): entity for entity in result.scalars().all()}

    async def _apply(
        self,
        owner_id: str,
        rows: Iterable[BaseModel],
        scope: str | None,
        *,
        prune: bool,
    ) -> ReconcileResult:
        existing = await self._load_existing(owner_id, scope)

        # Later duplicates of a natural key replace earlier ones
        snapshot: dict[tuple[Any, ...], dict[str, Any]] = {}
        for row in rows:
            values = row.model_dump()
            snapshot[self._key_of(values)] = values

        result = ReconcileResult()
        for key, values in snapshot.items():
            entity = existing.pop(key, None)
            if entity is None:
                self.add(self._model_class(owner_id=owner_id, **values))
                result.created += 1
            else:
                for field, value in values.items():
                    setattr(entity, field, value)
                result.updated += 1

        if prune and existing:
            model = self._model_class
            stale_ids = [entity.id for entity in existing.values()]  # type: ignore[attr-defined]
            await self._session.execute(delete(model).where(model.id.in_(stale_ids)))  # type: ignore[attr-defined]
            result.deleted = len(stale_ids)

        await self.flush()
        return result
