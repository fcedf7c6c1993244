"""Sync module - GitHub account to database synchronization.

Services:
- AccountSyncOrchestrator: full resync of an owner's collections (fail-fast by default)
- ForkImportOrchestrator: parent-repository import for an owner's forks (best-effort)
- StageTracker: per-unit transactions, failure policy and SyncStatus publishing
- SyncRunLock: per-owner run lease
- SyncLauncher: detached runs started from the OAuth callback
"""

from .account_sync import AccountSyncOrchestrator
from .enums import FailurePolicy, OutputFormat, StageOutcome, SyncStage
from .fork_import import ForkImportOrchestrator
from .launcher import SyncLauncher
from .lease import SyncAlreadyRunningError, SyncLeaseLostError, SyncRunLock
from .results import StageResult, SyncRunResult, UnitFailure
from .stages import StageAbortedError, StageTracker

__all__ = [
    # Orchestrators
    "AccountSyncOrchestrator",
    "ForkImportOrchestrator",
    "SyncLauncher",
    # Stage engine
    "StageAbortedError",
    "StageTracker",
    # Lease
    "SyncAlreadyRunningError",
    "SyncLeaseLostError",
    "SyncRunLock",
    # Results
    "StageResult",
    "SyncRunResult",
    "UnitFailure",
    # Enums
    "FailurePolicy",
    "OutputFormat",
    "StageOutcome",
    "SyncStage",
]
