"""Result objects for sync operations.

Structured results provide consistent interfaces for monitoring,
error handling, and CLI output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from .enums import FailurePolicy, StageOutcome, SyncStage


@dataclass
class UnitFailure:
    """A failed unit of work: a whole stage, or one repository within it."""

    stage: SyncStage
    repository: str | None
    error: Exception

    def to_dict(self) -> dict[str, Any]:
        return {
            "stage": self.stage.value,
            "repository": self.repository,
            "error": str(self.error),
            "error_type": type(self.error).__name__,
        }


@dataclass
class StageResult:
    """Result of one stage of a run."""

    stage: SyncStage
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None

    items: int = 0
    """Rows written by the stage."""

    repositories: int = 0
    """Repositories processed successfully (per-repository stages only)."""

    failures: list[UnitFailure] = field(default_factory=list)
    """Every failed unit, in order."""

    fatal_error: Exception | None = None
    """Set when the stage as a whole failed or aborted the run."""

    @property
    def outcome(self) -> StageOutcome:
        if self.fatal_error is not None:
            return StageOutcome.FATAL
        if self.failures:
            return StageOutcome.PARTIAL_FAILURE
        return StageOutcome.SUCCESS

    @property
    def succeeded(self) -> bool:
        return self.outcome is StageOutcome.SUCCESS

    @property
    def failed_repositories(self) -> list[str]:
        """Repositories whose unit failed in this stage."""
        return [f.repository for f in self.failures if f.repository is not None]

    @property
    def duration_seconds(self) -> float:
        end = self.completed_at or datetime.now(UTC)
        return (end - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "stage": self.stage.value,
            "outcome": self.outcome.value,
            "items": self.items,
            "repositories": self.repositories,
            "failed_repositories": self.failed_repositories,
            "duration_seconds": round(self.duration_seconds, 2),
        }
        if self.failures:
            result["failures"] = [f.to_dict() for f in self.failures]
        if self.fatal_error is not None:
            result["error"] = str(self.fatal_error)
            result["error_type"] = type(self.fatal_error).__name__
        return result


@dataclass
class SyncRunResult:
    """Result of a whole run (account sync or fork import).

    Aggregates stage results in the order the stages ran.
    """

    owner_id: str
    policy: FailurePolicy
    stages: dict[SyncStage, StageResult] = field(default_factory=dict)
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None

    aborted: bool = False
    """True if a fail-fast failure or a lost lease stopped the run early."""

    lease_lost: bool = False
    """True if the run stopped because its lease was deleted or taken over."""

    all_synced: bool = False
    """Value written to SyncStatus.all_synced at the end of the run."""

    repositories: list[str] = field(default_factory=list)
    """Repositories the per-repository stages iterated over."""

    @property
    def succeeded_stages(self) -> list[SyncStage]:
        return [stage for stage, r in self.stages.items() if r.succeeded]

    @property
    def failed_stages(self) -> list[SyncStage]:
        return [stage for stage, r in self.stages.items() if not r.succeeded]

    @property
    def failures(self) -> list[UnitFailure]:
        return [f for r in self.stages.values() for f in r.failures]

    @property
    def success(self) -> bool:
        """Check if the run completed without any failure."""
        return not self.aborted and not self.failures

    @property
    def duration_seconds(self) -> float:
        end = self.completed_at or datetime.now(UTC)
        return (end - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "summary": {
                "owner_id": self.owner_id,
                "policy": self.policy.value,
                "success": self.success,
                "aborted": self.aborted,
                "lease_lost": self.lease_lost,
                "all_synced": self.all_synced,
                "total_repos": len(self.repositories),
                "stages_succeeded": [s.value for s in self.succeeded_stages],
                "stages_failed": [s.value for s in self.failed_stages],
                "total_failures": len(self.failures),
                "duration_seconds": round(self.duration_seconds, 2),
            },
            "stages": [r.to_dict() for r in self.stages.values()],
        }
