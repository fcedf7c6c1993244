"""Error responses for the HTTP surface.

Every error body has the shape ``{"error": message}``. Unexpected
exceptions become a generic 500 without any partial result.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from github_mirror.config import ConfigurationError
from github_mirror.github.exceptions import OAuthExchangeError
from github_mirror.logging import get_logger

logger = get_logger(__name__)


class ApiError(Exception):
    """An error with a fixed status code and client-facing message."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class AuthenticationRequiredError(ApiError):
    def __init__(self) -> None:
        super().__init__(401, "Authentication required")


class UnknownEntityError(ApiError):
    def __init__(self, entity: str) -> None:
        super().__init__(400, "Unknown entity")
        self.entity = entity


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    field = ".".join(str(loc) for loc in errors[0]["loc"]) if errors else "request"
    message = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": f"Invalid {field}: {message}"})


async def _configuration_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Configuration error on {}: {}", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


async def _oauth_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("OAuth exchange failed: {}", exc)
    return JSONResponse(status_code=500, content={"error": "Failed to obtain access token"})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error("Unhandled error on {} {}", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def register_error_handlers(app: FastAPI) -> None:
    """Install the error handlers on ``app``."""
    app.add_exception_handler(ApiError, _api_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ConfigurationError, _configuration_error_handler)
    app.add_exception_handler(OAuthExchangeError, _oauth_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
