"""Fixtures for HTTP tests.

The app runs in-process through ``httpx.ASGITransport``. The transport does
not run the lifespan, so the launcher is installed on ``app.state`` here and
the database session is overridden with the test session.
"""

import httpx
import pytest

from github_mirror.api import create_app
from github_mirror.api.dependencies import (
    get_client_factory,
    get_db,
    get_oauth,
    get_optional_owner,
)
from github_mirror.github.oauth import OAuthToken
from tests.conftest import OWNER_ID
from tests.fixtures.fake_github import FakeGitHub
from tests.fixtures.github_responses import GITHUB_AUTHENTICATED_USER_RESPONSE


class RecordingLauncher:
    """Stands in for SyncLauncher; records launches instead of running them."""

    def __init__(self) -> None:
        self.launches: list[tuple[str, str]] = []

    def launch(self, owner_id: str, access_token: str) -> None:
        self.launches.append((owner_id, access_token))

    async def shutdown(self) -> None:
        pass


class FakeOAuth:
    def __init__(self, token: str = "gho_fresh", error: Exception | None = None) -> None:
        self.token = token
        self.error = error
        self.codes: list[str] = []

    def authorize_url(self, state: str | None = None) -> str:
        return "https://github.com/login/oauth/authorize?client_id=Iv1.abc"

    async def exchange_code(self, code: str) -> OAuthToken:
        self.codes.append(code)
        if self.error is not None:
            raise self.error
        return OAuthToken(access_token=self.token, scopes=["repo", "read:org"])


@pytest.fixture
def fake_github() -> FakeGitHub:
    fake = FakeGitHub()
    fake.objects["/user"] = GITHUB_AUTHENTICATED_USER_RESPONSE
    return fake


@pytest.fixture
def fake_oauth() -> FakeOAuth:
    return FakeOAuth()


@pytest.fixture
def launcher() -> RecordingLauncher:
    return RecordingLauncher()


@pytest.fixture
def app(db_session, fake_github, fake_oauth, launcher):
    application = create_app()
    application.state.launcher = launcher

    async def override_db():
        yield db_session

    application.dependency_overrides[get_db] = override_db
    application.dependency_overrides[get_oauth] = lambda: fake_oauth
    application.dependency_overrides[get_client_factory] = lambda: fake_github.client
    return application


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http


@pytest.fixture
def logged_in(app) -> str:
    """Authenticate every request as OWNER_ID."""
    app.dependency_overrides[get_optional_owner] = lambda: OWNER_ID
    return OWNER_ID
