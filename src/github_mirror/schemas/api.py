"""Response schemas for the HTTP surface that are not plain row reads."""

from datetime import datetime
from typing import Any

from .base import ApiSchema


class Page(ApiSchema):
    """One page of a generic entity listing."""

    data: list[dict[str, Any]]
    page: int
    limit: int
    total: int


class IntegrationStatus(ApiSchema):
    """Connection status; username/last_synced only when connected."""

    connected: bool
    username: str | None = None
    last_synced: datetime | None = None


class ProfileRead(ApiSchema):
    github_id: str
    username: str
    avatar_url: str
    last_synced: datetime | None


class SummaryRead(ApiSchema):
    """Per-collection counts for the current owner."""

    organizations: int
    repositories: int
    commits: int
    pull_requests: int
    issues: int
    releases: int


class SyncStatusRead(ApiSchema):
    owner_id: str
    users: bool
    organizations: bool
    repos: bool
    commits: bool
    pulls: bool
    issues: bool
    changelogs: bool
    all_synced: bool
    updated_at: datetime
