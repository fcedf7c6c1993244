"""Pydantic schemas for GitHub Mirror.

This module provides GitHub payload parsing, row schemas written by the
sync, and output serialization models for the HTTP surface.
"""

from .api import IntegrationStatus, Page, ProfileRead, SummaryRead, SyncStatusRead
from .base import ApiSchema, SchemaBase
from .entities import (
    CommitCreate,
    CommitRead,
    ExternalUserCreate,
    ExternalUserRead,
    IssueCreate,
    IssueRead,
    OrganizationCreate,
    OrganizationRead,
    PullRequestCreate,
    PullRequestRead,
    ReleaseCreate,
    ReleaseRead,
    RepositoryCreate,
    RepositoryRead,
)
from .github_api import (
    GitHubCommit,
    GitHubCommitAuthor,
    GitHubCommitDetail,
    GitHubIssue,
    GitHubOrganization,
    GitHubPullRequest,
    GitHubRateLimit,
    GitHubRelease,
    GitHubRepository,
    GitHubRepositoryParent,
    GitHubUser,
)

__all__ = [
    # Base
    "ApiSchema",
    "SchemaBase",
    # Rows
    "CommitCreate",
    "ExternalUserCreate",
    "IssueCreate",
    "OrganizationCreate",
    "PullRequestCreate",
    "ReleaseCreate",
    "RepositoryCreate",
    # Reads
    "CommitRead",
    "ExternalUserRead",
    "IssueRead",
    "OrganizationRead",
    "PullRequestRead",
    "ReleaseRead",
    "RepositoryRead",
    # HTTP responses
    "IntegrationStatus",
    "Page",
    "ProfileRead",
    "SummaryRead",
    "SyncStatusRead",
    # GitHub API
    "GitHubCommit",
    "GitHubCommitAuthor",
    "GitHubCommitDetail",
    "GitHubIssue",
    "GitHubOrganization",
    "GitHubPullRequest",
    "GitHubRateLimit",
    "GitHubRelease",
    "GitHubRepository",
    "GitHubRepositoryParent",
    "GitHubUser",
]
