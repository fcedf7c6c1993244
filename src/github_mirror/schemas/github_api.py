"""Pydantic schemas for parsing GitHub API responses.

These schemas map directly to the GitHub REST API response structure and
ignore fields the mirror does not store.
See: https://docs.github.com/en/rest
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from .entities import (
    CommitCreate,
    ExternalUserCreate,
    IssueCreate,
    OrganizationCreate,
    PullRequestCreate,
    ReleaseCreate,
    RepositoryCreate,
)


class GitHubUser(BaseModel):
    """GitHub user object (full profile from /user, or the short member form)."""

    id: int = Field(description="GitHub user ID")
    login: str = Field(description="GitHub username")
    name: str | None = Field(default=None, description="Display name (profile only)")
    avatar_url: str = Field(default="", description="Avatar image URL")
    html_url: str = Field(default="", description="Profile page URL")

    def to_external_user_create(self) -> ExternalUserCreate:
        """Convert to an ExternalUser row, falling back to login for the name."""
        return ExternalUserCreate(
            external_id=self.id,
            login=self.login,
            name=self.name or self.login,
            avatar_url=self.avatar_url,
            url=self.html_url,
        )


class GitHubOrganization(BaseModel):
    """GitHub organization object from GET /user/orgs."""

    id: int = Field(description="Organization ID")
    login: str = Field(description="Organization login")
    name: str | None = Field(default=None, description="Display name")
    description: str | None = Field(default=None, description="Organization description")
    url: str = Field(default="", description="API URL of the organization")
    public_repos: int | None = Field(default=None, description="Public repository count")
    members_count: int | None = Field(default=None, description="Member count")

    def to_organization_create(self) -> OrganizationCreate:
        return OrganizationCreate(
            org_id=self.id,
            login=self.login,
            name=self.name or self.login,
            description=self.description or "",
            url=self.url,
            public_repo_count=self.public_repos or 0,
            member_count=self.members_count or 0,
        )


class GitHubRepositoryParent(BaseModel):
    """The ``parent`` reference on a fork's detail record."""

    id: int
    full_name: str


class GitHubRepository(BaseModel):
    """GitHub repository object.

    Maps to: GET /user/repos (listing) and GET /repos/{owner}/{repo} (detail).
    Only the detail record carries ``parent`` for forks.
    """

    id: int = Field(description="Repository ID")
    name: str = Field(description="Repository name")
    full_name: str = Field(description="owner/name")
    private: bool = Field(default=False)
    html_url: str = Field(default="")
    description: str | None = Field(default=None)
    language: str | None = Field(default=None)
    forks_count: int = Field(default=0)
    stargazers_count: int = Field(default=0)
    open_issues_count: int = Field(default=0)
    fork: bool = Field(default=False, description="Whether the repository is a fork")
    parent: GitHubRepositoryParent | None = Field(default=None, description="Upstream of a fork")

    @property
    def resolved_full_name(self) -> str:
        """Full name of the upstream parent, or of this repository if it has none."""
        return self.parent.full_name if self.parent is not None else self.full_name

    def to_repository_create(self) -> RepositoryCreate:
        return RepositoryCreate(
            repo_id=self.id,
            name=self.name,
            full_name=self.full_name,
            is_private=self.private,
            url=self.html_url,
            description=self.description or "",
            language=self.language,
            fork_count=self.forks_count,
            star_count=self.stargazers_count,
            open_issue_count=self.open_issues_count,
        )


class GitHubCommitAuthor(BaseModel):
    """Commit author info (from git, not GitHub user)."""

    name: str = Field(default="", description="Author name")
    email: str = Field(default="", description="Author email")
    date: datetime | None = Field(default=None, description="Commit date (UTC)")


class GitHubCommitDetail(BaseModel):
    """Nested commit detail object."""

    message: str = Field(default="", description="Commit message")
    author: GitHubCommitAuthor | None = Field(default=None, description="Commit author info")


class GitHubCommit(BaseModel):
    """GitHub commit object from GET /repos/{owner}/{repo}/commits."""

    sha: str = Field(description="Commit SHA")
    html_url: str = Field(default="")
    commit: GitHubCommitDetail = Field(description="Commit details")
    author: GitHubUser | None = Field(
        default=None, description="Linked GitHub account (None if the email is unlinked)"
    )

    def to_commit_create(self, repo_full_name: str) -> CommitCreate:
        git_author = self.commit.author
        return CommitCreate(
            repo_full_name=repo_full_name,
            sha=self.sha,
            message=self.commit.message,
            author_name=git_author.name if git_author else "",
            author_login=self.author.login if self.author else "",
            committed_at=git_author.date if git_author else None,
            url=self.html_url,
        )


class GitHubPullRequest(BaseModel):
    """GitHub Pull Request object from GET /repos/{owner}/{repo}/pulls."""

    number: int = Field(description="PR number")
    title: str = Field(description="PR title")
    state: str = Field(description="PR state (open, closed)")
    html_url: str = Field(default="")
    user: GitHubUser | None = Field(default=None, description="PR author")
    created_at: datetime = Field(description="When PR was created")
    merged_at: datetime | None = Field(default=None, description="When PR was merged")

    def to_pull_request_create(self, repo_full_name: str) -> PullRequestCreate:
        return PullRequestCreate(
            repo_full_name=repo_full_name,
            number=self.number,
            title=self.title,
            state=self.state,
            author_login=self.user.login if self.user else "",
            created_at=self.created_at,
            merged_at=self.merged_at,
            url=self.html_url,
        )


class GitHubIssue(BaseModel):
    """GitHub issue object from GET /repos/{owner}/{repo}/issues.

    The issues endpoint also returns pull requests; those carry a
    ``pull_request`` object.
    """

    number: int
    title: str
    state: str
    html_url: str = Field(default="")
    user: GitHubUser | None = Field(default=None)
    created_at: datetime
    closed_at: datetime | None = Field(default=None)
    pull_request: dict[str, Any] | None = Field(default=None, description="Pull request marker")

    @property
    def is_pull_request(self) -> bool:
        """Check if this listing entry is actually a pull request."""
        return self.pull_request is not None

    def to_issue_create(self, repo_full_name: str) -> IssueCreate:
        return IssueCreate(
            repo_full_name=repo_full_name,
            number=self.number,
            title=self.title,
            state=self.state,
            author_login=self.user.login if self.user else "",
            created_at=self.created_at,
            closed_at=self.closed_at,
            url=self.html_url,
        )


class GitHubRelease(BaseModel):
    """GitHub release object from GET /repos/{owner}/{repo}/releases."""

    id: int
    tag_name: str
    name: str | None = Field(default=None)
    body: str | None = Field(default=None)
    html_url: str = Field(default="")
    created_at: datetime | None = Field(default=None)
    published_at: datetime | None = Field(default=None)

    def to_release_create(self, repo_full_name: str) -> ReleaseCreate:
        return ReleaseCreate(
            repo_full_name=repo_full_name,
            release_id=self.id,
            tag_name=self.tag_name,
            name=self.name or "",
            body=self.body or "",
            created_at=self.created_at,
            published_at=self.published_at,
            url=self.html_url,
        )


class GitHubRateLimit(BaseModel):
    """Core rate limit pool from GET /rate_limit (the ``rate`` object)."""

    limit: int
    remaining: int
    reset: int = Field(description="Unix timestamp when the pool resets")
    used: int = Field(default=0)

    @property
    def reset_at(self) -> datetime:
        """Reset time as an aware datetime."""
        return datetime.fromtimestamp(self.reset, tz=UTC)
