"""Engine and session lifecycle for the mirror database.

One engine and one session factory exist per process; both are built on
first use from ``Settings.database_url`` and torn down by ``dispose_engine``
(application shutdown, CLI exit, tests switching databases).
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from github_mirror.config import get_settings
from github_mirror.db.models import Base
from github_mirror.logging import get_logger

logger = get_logger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _engine_options(database_url: str) -> dict[str, Any]:
    """Pool settings for the backend named in ``database_url``.

    SQLite gets no pool: a file database shared by the API process and a
    background sync otherwise reports "database is locked".
    """
    if make_url(database_url).get_backend_name() == "sqlite":
        return {"poolclass": NullPool}
    return {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 1800,
        "pool_pre_ping": True,
    }


def get_engine() -> AsyncEngine:
    """The process-wide engine, created on first call."""
    global _engine
    if _engine is None:
        url = get_settings().database_url
        # SQL statements reach loguru through the sqlalchemy.engine interceptor
        _engine = create_async_engine(url, echo=False, **_engine_options(url))
        logger.debug("Database engine created for {}", make_url(url).render_as_string(hide_password=True))
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """The process-wide session factory bound to ``get_engine()``."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Unit of work: commit when the block exits cleanly, roll back otherwise.

    Usage:
        async with get_session() as session:
            integration = await IntegrationRepository(session).get_by_owner(owner_id)
    """
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        await session.commit()


async def create_tables() -> None:
    """Create the schema directly from the models.

    Migrations (``alembic upgrade head``) remain the way to evolve an
    existing database; this serves fresh installs and tests.
    """
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables() -> None:
    """Drop every mirror table. All data is lost."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def dispose_engine() -> None:
    """Close pooled connections and forget the engine and session factory."""
    global _engine, _session_factory
    engine, _engine, _session_factory = _engine, None, None
    if engine is not None:
        await engine.dispose()
        logger.debug("Database engine disposed")
