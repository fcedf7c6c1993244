"""Test fixtures for GitHub Mirror."""

from .fake_github import API_URL, FakeGitHub
from .github_responses import (
    GITHUB_AUTHENTICATED_USER_RESPONSE,
    GITHUB_MEMBER_RESPONSE,
    GITHUB_ORG_RESPONSE,
    GITHUB_RATE_LIMIT_RESPONSE,
    commit_payload,
    issue_payload,
    pull_payload,
    release_payload,
    repo_payload,
)

__all__ = [
    # In-memory GitHub API
    "API_URL",
    "FakeGitHub",
    # Mock GitHub API responses
    "GITHUB_AUTHENTICATED_USER_RESPONSE",
    "GITHUB_MEMBER_RESPONSE",
    "GITHUB_ORG_RESPONSE",
    "GITHUB_RATE_LIMIT_RESPONSE",
    "commit_payload",
    "issue_payload",
    "pull_payload",
    "release_payload",
    "repo_payload",
]
