"""Per-owner run lease: at most one sync run per owner at a time.

The lease is a row in ``sync_leases`` keyed by owner. A run acquires it by
inserting the row, or by taking over a row whose expiry has passed (a run
that died without releasing). The lease is committed immediately so other
processes see it, renewed with every unit the run commits, and released in
a ``finally`` path.
"""

from __future__ import annotations

import secrets
from datetime import UTC, datetime, timedelta
from types import TracebackType

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from github_mirror.db.models import SyncLease
from github_mirror.db.repositories import SyncLeaseRepository
from github_mirror.logging import get_logger

logger = get_logger(__name__)


class SyncAlreadyRunningError(Exception):
    """Raised when another run holds a live lease for the owner."""

    def __init__(self, owner_id: str) -> None:
        super().__init__(f"A sync is already running for owner {owner_id}")
        self.owner_id = owner_id


class SyncLeaseLostError(Exception):
    """Raised when a run finds its lease deleted or taken over by another run."""

    def __init__(self, owner_id: str) -> None:
        super().__init__(f"Sync lease for owner {owner_id} was lost; run stopped")
        self.owner_id = owner_id


class SyncRunLock:
    """Async context manager holding the owner's run lease.

    Usage:
        async with SyncRunLock(session, owner_id, ttl=timedelta(hours=1)):
            ...  # run stages

    Raises:
        SyncAlreadyRunningError: On entry, if a live lease exists
    """

    def __init__(self, session: AsyncSession, owner_id: str, ttl: timedelta) -> None:
        self._session = session
        self._owner_id = owner_id
        self._ttl = ttl
        self._repo = SyncLeaseRepository(session)
        self.token = secrets.token_hex(16)
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    async def acquire(self) -> None:
        """Acquire the lease, taking over an expired one.

        Raises:
            SyncAlreadyRunningError: If a live lease exists
        """
        now = datetime.now(UTC)
        expires_at = now + self._ttl

        if await self._repo.take_over_expired(self._owner_id, self.token, now, expires_at):
            await self._session.commit()
            logger.warning("Took over expired sync lease for owner {}", self._owner_id)
            self._held = True
            return

        if await self._repo.get_by_owner(self._owner_id) is not None:
            await self._session.rollback()
            raise SyncAlreadyRunningError(self._owner_id)

        self._repo.add(
            SyncLease(
                owner_id=self._owner_id,
                token=self.token,
                acquired_at=now,
                expires_at=expires_at,
            )
        )
        try:
            await self._session.commit()
        except IntegrityError as e:
            # Another run inserted between the check and the commit
            await self._session.rollback()
            raise SyncAlreadyRunningError(self._owner_id) from e

        self._held = True
        logger.debug("Acquired sync lease for owner {}", self._owner_id)

    async def renew(self) -> None:
        """Extend the lease by the TTL inside the caller's open transaction.

        Raises:
            SyncLeaseLostError: If the lease no longer carries this lock's token
        """
        expires_at = datetime.now(UTC) + self._ttl
        if not await self._repo.renew(self._owner_id, self.token, expires_at):
            raise SyncLeaseLostError(self._owner_id)

    async def release(self) -> None:
        """Release the lease if this lock still owns it."""
        if not self._held:
            return
        # Discard whatever the run left uncommitted before deleting the lease
        await self._session.rollback()
        released = await self._repo.release(self._owner_id, self.token)
        await self._session.commit()
        self._held = False
        if not released:
            logger.warning("Sync lease for owner {} was lost before release", self._owner_id)

    async def __aenter__(self) -> SyncRunLock:
        await self.acquire()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.release()
