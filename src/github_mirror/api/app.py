"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from github_mirror import __version__
from github_mirror.config import DEV_SESSION_SECRET, ConfigurationError, Settings, get_settings
from github_mirror.db.engine import create_tables, dispose_engine
from github_mirror.github.sync import SyncLauncher
from github_mirror.logging import get_logger

from .errors import register_error_handlers
from .routes import auth_router, github_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await create_tables()
    app.state.launcher = SyncLauncher()
    logger.info("Server started")
    try:
        yield
    finally:
        await app.state.launcher.shutdown()
        await dispose_engine()
        logger.info("Server stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Settings to use (defaults to the cached environment settings)

    Raises:
        ConfigurationError: In production, when the session secret is the
            development default
    """
    settings = settings or get_settings()
    web = settings.web

    docs: dict[str, str | None] = {}
    if settings.is_production:
        if web.session_secret == DEV_SESSION_SECRET:
            raise ConfigurationError(
                "Session secret not configured. Set WEB__SESSION_SECRET in your environment."
            )
        docs = {"docs_url": None, "redoc_url": None, "openapi_url": None}

    app = FastAPI(title="GitHub Mirror", version=__version__, lifespan=lifespan, **docs)
    app.add_middleware(
        SessionMiddleware,
        secret_key=web.session_secret,
        session_cookie=web.session_cookie,
        same_site="lax",
        https_only=web.https_only,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[web.frontend_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.include_router(auth_router)
    app.include_router(github_router)

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "OK", "message": "Server is running"}

    return app
