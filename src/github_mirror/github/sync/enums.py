"""Enums for sync operations."""

from enum import Enum


class SyncStage(str, Enum):
    """One resource-type step of a sync, in run order.

    Values double as the SyncStatus flag names.
    """

    USERS = "users"
    ORGANIZATIONS = "organizations"
    REPOS = "repos"
    COMMITS = "commits"
    PULLS = "pulls"
    ISSUES = "issues"
    CHANGELOGS = "changelogs"


class FailurePolicy(str, Enum):
    """What a failed unit of work does to the rest of the run."""

    FAIL_FAST = "fail_fast"
    """The first failure aborts every remaining stage."""

    BEST_EFFORT = "best_effort"
    """Failures are recorded and processing continues."""


class StageOutcome(str, Enum):
    """Outcome of one stage."""

    SUCCESS = "success"
    """Every unit of the stage completed."""

    PARTIAL_FAILURE = "partial_failure"
    """Some repositories failed; the rest were written."""

    FATAL = "fatal"
    """The stage as a whole failed or aborted the run."""


class OutputFormat(str, Enum):
    """Output format for CLI commands."""

    TEXT = "text"
    """Human-readable text output."""

    JSON = "json"
    """Machine-readable JSON output."""
