"""Shared fixtures: an in-memory database and a fixed timeline.

Model rows come from tests.factories; GitHub traffic is served by
tests.fixtures.fake_github.FakeGitHub from payloads built with
tests.fixtures.github_responses.
"""

from datetime import UTC, datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from github_mirror.config import SyncConfig
from github_mirror.db.models import Base

# Timeline shared by factories and fake payloads, so stored rows and
# upstream JSON agree on dates.
JAN_10 = datetime(2024, 1, 10, 9, 0, 0, tzinfo=UTC)  # issue opened
JAN_12 = datetime(2024, 1, 12, 16, 0, 0, tzinfo=UTC)  # pull request merged
JAN_15 = datetime(2024, 1, 15, 10, 0, 0, tzinfo=UTC)  # first commit
JAN_16 = datetime(2024, 1, 16, 14, 0, 0, tzinfo=UTC)  # second commit
JAN_20 = datetime(2024, 1, 20, 16, 0, 0, tzinfo=UTC)  # release published

JAN_10_ISO = "2024-01-10T09:00:00Z"
JAN_12_ISO = "2024-01-12T16:00:00Z"
JAN_15_ISO = "2024-01-15T10:00:00Z"
JAN_16_ISO = "2024-01-16T14:00:00Z"
JAN_20_ISO = "2024-01-20T16:00:00Z"

# GitHub user id of the account under test
OWNER_ID = "1001"


@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test.

    StaticPool pins a single connection; a second connection to
    ``:memory:`` would see an empty database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    """Factory configured like the application's own."""
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory):
    """Session for one test; anything left uncommitted is rolled back."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def sync_config() -> SyncConfig:
    """Default sync settings, unaffected by the environment."""
    return SyncConfig()
