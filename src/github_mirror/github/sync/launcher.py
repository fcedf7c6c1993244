"""Detached account-sync runs started from HTTP requests.

The OAuth callback returns immediately after starting a sync; progress is
observed by polling SyncStatus. Errors of a detached run are never surfaced
to a response, only logged.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from github_mirror.db.engine import get_session_factory
from github_mirror.github.client import GitHubClient
from github_mirror.logging import bind_owner, get_logger

from .account_sync import AccountSyncOrchestrator
from .lease import SyncAlreadyRunningError
from .results import SyncRunResult

logger = get_logger(__name__)

ClientFactory = Callable[[str], GitHubClient]


class SyncLauncher:
    """Starts account syncs as background tasks and tracks them until done.

    Usage:
        launcher = SyncLauncher()
        launcher.launch(owner_id, access_token)
        ...
        await launcher.shutdown()  # on application stop
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        client_factory: ClientFactory = GitHubClient,
    ) -> None:
        """Initialize the launcher.

        Args:
            session_factory: Factory for the per-run session (defaults to the app engine)
            client_factory: Builds a GitHub client from an access token
        """
        self._session_factory = session_factory
        self._client_factory = client_factory
        self._tasks: set[asyncio.Task[SyncRunResult | None]] = set()

    @property
    def running(self) -> int:
        """Number of runs still in flight."""
        return len(self._tasks)

    def launch(self, owner_id: str, access_token: str) -> asyncio.Task[SyncRunResult | None]:
        """Start an account sync for ``owner_id`` without waiting for it."""
        task = asyncio.create_task(self._run(owner_id, access_token), name=f"sync-{owner_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        bind_owner(owner_id).info("Account sync scheduled")
        return task

    async def _run(self, owner_id: str, access_token: str) -> SyncRunResult | None:
        log = bind_owner(owner_id)
        session_factory = self._session_factory or get_session_factory()
        try:
            async with self._client_factory(access_token) as client, session_factory() as session:
                return await AccountSyncOrchestrator(client, session).run(owner_id)
        except SyncAlreadyRunningError:
            log.warning("Sync already running, dropping this trigger")
        except Exception:
            # Nobody awaits this task; the log and SyncStatus are the only trace
            log.exception("Account sync crashed")
        return None

    async def shutdown(self) -> None:
        """Wait for every in-flight run to finish."""
        if self._tasks:
            logger.info("Waiting for {} sync run(s) to finish", len(self._tasks))
            await asyncio.gather(*self._tasks, return_exceptions=True)
