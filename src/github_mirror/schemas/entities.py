"""Row and read schemas for the mirrored collections.

``*Create`` schemas carry the columns written by a sync (``owner_id`` is
supplied by the repository layer). ``*Read`` schemas are what the HTTP
surface returns, serialized with camelCase keys.
"""

from datetime import datetime

from pydantic import Field

from .base import ApiSchema, SchemaBase

# ------------------------------------------------------------------------------
# Create schemas (sync -> database)
# ------------------------------------------------------------------------------


class OrganizationCreate(SchemaBase):
    """Organization row built from a GitHub org listing."""

    org_id: int
    login: str = Field(max_length=100)
    name: str = ""
    description: str = ""
    url: str = ""
    public_repo_count: int = 0
    member_count: int = 0


class ExternalUserCreate(SchemaBase):
    """User row built from a GitHub user object."""

    external_id: int
    login: str = Field(max_length=100)
    name: str = ""
    avatar_url: str = ""
    url: str = ""


class RepositoryCreate(SchemaBase):
    """Repository row built from a GitHub repository object."""

    repo_id: int
    name: str
    full_name: str = Field(max_length=200, description="Full repository path (e.g., 'acme/widget')")
    is_private: bool = False
    url: str = ""
    description: str = ""
    language: str | None = None
    fork_count: int = 0
    star_count: int = 0
    open_issue_count: int = 0


class CommitCreate(SchemaBase):
    """Commit row."""

    repo_full_name: str
    sha: str
    message: str = ""
    author_name: str = ""
    author_login: str = ""
    committed_at: datetime | None = None
    url: str = ""


class PullRequestCreate(SchemaBase):
    """Pull request row."""

    repo_full_name: str
    number: int
    title: str
    state: str
    author_login: str = ""
    created_at: datetime
    merged_at: datetime | None = None
    url: str = ""


class IssueCreate(SchemaBase):
    """Issue row."""

    repo_full_name: str
    number: int
    title: str
    state: str
    author_login: str = ""
    created_at: datetime
    closed_at: datetime | None = None
    url: str = ""


class ReleaseCreate(SchemaBase):
    """Release row."""

    repo_full_name: str
    release_id: int
    tag_name: str
    name: str = ""
    body: str = ""
    created_at: datetime | None = None
    published_at: datetime | None = None
    url: str = ""


# ------------------------------------------------------------------------------
# Read schemas (database -> HTTP)
# ------------------------------------------------------------------------------


class OrganizationRead(ApiSchema):
    id: int
    owner_id: str
    org_id: int
    login: str
    name: str
    description: str
    url: str
    public_repo_count: int
    member_count: int


class ExternalUserRead(ApiSchema):
    id: int
    owner_id: str
    external_id: int
    login: str
    name: str
    avatar_url: str
    url: str


class RepositoryRead(ApiSchema):
    id: int
    owner_id: str
    repo_id: int
    name: str
    full_name: str
    is_private: bool
    url: str
    description: str
    language: str | None
    fork_count: int
    star_count: int
    open_issue_count: int


class CommitRead(ApiSchema):
    id: int
    owner_id: str
    repo_full_name: str
    sha: str
    message: str
    author_name: str
    author_login: str
    committed_at: datetime | None
    url: str


class PullRequestRead(ApiSchema):
    id: int
    owner_id: str
    repo_full_name: str
    number: int
    title: str
    state: str
    author_login: str
    created_at: datetime
    merged_at: datetime | None
    url: str


class IssueRead(ApiSchema):
    id: int
    owner_id: str
    repo_full_name: str
    number: int
    title: str
    state: str
    author_login: str
    created_at: datetime
    closed_at: datetime | None
    url: str


class ReleaseRead(ApiSchema):
    id: int
    owner_id: str
    repo_full_name: str
    release_id: int
    tag_name: str
    name: str
    body: str
    created_at: datetime | None
    published_at: datetime | None
    url: str
