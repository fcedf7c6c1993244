"""HTTP routers."""

from .auth import router as auth_router
from .github import router as github_router

__all__ = ["auth_router", "github_router"]
