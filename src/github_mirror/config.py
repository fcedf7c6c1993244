"""Configuration settings for GitHub Mirror."""

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when a required setting is missing or invalid."""

    pass


FailurePolicyName = Literal["fail_fast", "best_effort"]

# Signing key shipped for local development only
DEV_SESSION_SECRET = "sessionsecret"


class GitHubConfig(BaseModel):
    """Configuration for the upstream GitHub API and OAuth app."""

    api_url: str = Field(
        default="https://api.github.com",
        description="Base URL of the GitHub REST API",
    )
    oauth_url: str = Field(
        default="https://github.com",
        description="Base URL for the OAuth authorize and token endpoints",
    )
    client_id: str = Field(default="", description="OAuth app client ID")
    client_secret: str = Field(default="", description="OAuth app client secret")
    redirect_uri: str = Field(
        default="http://localhost:3000/auth/github/callback",
        description="Callback URL registered with the OAuth app",
    )
    scopes: list[str] = Field(
        default_factory=lambda: ["repo", "read:org", "read:user"],
        description="Scopes requested during authorization",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Transport timeout for each upstream request",
    )

    def require_oauth_credentials(self) -> None:
        """Fail fast when the OAuth app is not configured."""
        if not self.client_id:
            raise ConfigurationError(
                "GitHub Client ID not configured. Set GITHUB__CLIENT_ID in your environment."
            )
        if not self.client_secret:
            raise ConfigurationError(
                "GitHub Client secret not configured. Set GITHUB__CLIENT_SECRET in your environment."
            )


class WebConfig(BaseModel):
    """Configuration for the HTTP surface."""

    frontend_origin: str = Field(
        default="http://localhost:4200",
        description="Origin the browser is redirected to after login/logout",
    )
    session_secret: str = Field(
        default=DEV_SESSION_SECRET,
        description="Secret used to sign the session cookie",
    )
    session_cookie: str = Field(default="ghmirror_session", description="Session cookie name")
    https_only: bool = Field(default=False, description="Mark the session cookie Secure")
    host: str = Field(default="127.0.0.1", description="Bind address for `ghmirror serve`")
    port: int = Field(default=3000, ge=1, le=65535, description="Bind port for `ghmirror serve`")


class SyncConfig(BaseModel):
    """Configuration for account synchronization.

    Controls page sizes, the member fetch cap, failure policies and
    the per-owner run lease.
    """

    page_size: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Items per page for paged GitHub endpoints (GitHub caps at 100)",
    )
    release_page_size: int = Field(
        default=50,
        ge=1,
        le=100,
        description="Items per page when listing releases",
    )
    member_page_limit: int = Field(
        default=1,
        ge=0,
        description="Org member pages fetched per organization (0 = unlimited)",
    )

    failure_policy: FailurePolicyName = Field(
        default="fail_fast",
        description="Failure policy for the account sync",
    )
    fork_failure_policy: FailurePolicyName = Field(
        default="best_effort",
        description="Failure policy for the fork-resolution import",
    )

    fork_max_commits: int = Field(default=2000, ge=1, description="Commit cap per parent repo")
    fork_max_pulls: int = Field(default=1000, ge=1, description="Pull request cap per parent repo")
    fork_max_issues: int = Field(default=500, ge=1, description="Issue cap per parent repo")

    lease_ttl_minutes: int = Field(
        default=60,
        ge=1,
        description="Minutes before an abandoned run lease can be taken over",
    )

    @property
    def lease_ttl(self) -> timedelta:
        """Get the lease lifetime as a timedelta."""
        return timedelta(minutes=self.lease_ttl_minutes)


class LoggingConfig(BaseModel):
    """Optional file sink for loguru (the console sink is always on)."""

    log_file: str | None = Field(default=None, description="Write DEBUG logs to this file")
    rotation: str = Field(default="10 MB", description="Size or age at which the file rotates")
    retention: str = Field(default="7 days", description="How long rotated files are kept")
    serialize: bool = Field(default=False, description="Write one JSON object per record")


class Settings(BaseSettings):
    """Process-wide settings, read from the environment and ``.env``.

    Top-level fields map to plain variables (``DATABASE_URL``,
    ``GITHUB_TOKEN``); sections take a ``SECTION__`` prefix, e.g.
    ``GITHUB__CLIENT_ID`` or ``SYNC__MEMBER_PAGE_LIMIT``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./github_mirror.db",
        description="SQLAlchemy async URL of the mirror database",
    )
    github_token: str = Field(
        default="",
        description="Token for runs not tied to a stored integration (fork import, diagnostics)",
    )
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    web: WebConfig = Field(default_factory=WebConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Settings for this process, read once."""
    return Settings()
