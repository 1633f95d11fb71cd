from __future__ import annotations

"""
Error rendering and global exception handlers.

The request gate runs as HTTP middleware, outside FastAPI's exception handling,
so it renders its failures with :func:`error_response` directly. Route handlers
raise the same exceptions and reach the same renderer through the handlers
registered by :func:`register_exception_handlers`.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette import status
from structlog import get_logger

from src.core.exceptions import (
    AuthenticationError,
    MarketplaceError,
    PermissionError,
    RateLimitExceededError,
    SessionResolutionError,
)

__all__ = [
    "error_envelope",
    "error_response",
    "status_code_for",
    "authentication_error_handler",
    "permission_error_handler",
    "rate_limit_exceeded_error_handler",
    "marketplace_error_handler",
    "register_exception_handlers",
]

logger = get_logger(__name__)


def status_code_for(exc: MarketplaceError) -> int:
    """Maps an application error to its HTTP status code."""
    if isinstance(exc, RateLimitExceededError):
        return status.HTTP_429_TOO_MANY_REQUESTS
    if isinstance(exc, AuthenticationError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, PermissionError):
        return status.HTTP_403_FORBIDDEN
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_envelope(exc: MarketplaceError) -> dict:
    return {"success": False, "error": {"code": exc.code, "message": exc.message}}


def error_response(exc: MarketplaceError) -> JSONResponse:
    """Renders ``exc`` as the JSON error envelope with the matching status code.

    Rate-limit failures also carry a ``retry-after`` header in seconds.
    """
    headers = {}
    if isinstance(exc, RateLimitExceededError):
        headers["retry-after"] = str(exc.retry_after)
    return JSONResponse(
        status_code=status_code_for(exc),
        content=error_envelope(exc),
        headers=headers,
    )


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def authentication_error_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
    """Handles `AuthenticationError`, returning a `401 Unauthorized`."""
    logger.warning(
        "Authentication failure",
        error=exc.code,
        client_ip=_client_host(request),
        path=request.url.path,
    )
    return error_response(exc)


async def permission_error_handler(request: Request, exc: PermissionError) -> JSONResponse:
    """Handles `PermissionError`, returning a `403 Forbidden`.

    Invoked when an authenticated user attempts an action for which they lack
    the necessary role.
    """
    logger.warning(
        "Permission denied",
        error=exc.code,
        client_ip=_client_host(request),
        path=request.url.path,
    )
    return error_response(exc)


async def rate_limit_exceeded_error_handler(
    request: Request, exc: RateLimitExceededError
) -> JSONResponse:
    """Handles `RateLimitExceededError` raised by route handlers, returning a `429`."""
    logger.warning(
        "rate_limit_exceeded",
        client_ip=_client_host(request),
        path=request.url.path,
        retry_after=exc.retry_after,
    )
    return error_response(exc)


async def marketplace_error_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    """Handles the base `MarketplaceError`, returning a `500 Internal Server Error`.

    This serves as a fallback for application errors without a more specific handler.
    """
    logger.error(
        "An unhandled application error occurred",
        error_code=exc.code,
        error_message=exc.message,
        path=request.url.path,
    )
    return error_response(exc)


def register_exception_handlers(app: FastAPI) -> None:
    """Registers all custom exception handlers with the FastAPI application.

    Args:
        app: The `FastAPI` application instance.
    """
    app.add_exception_handler(RateLimitExceededError, rate_limit_exceeded_error_handler)
    app.add_exception_handler(AuthenticationError, authentication_error_handler)
    app.add_exception_handler(PermissionError, permission_error_handler)
    app.add_exception_handler(SessionResolutionError, marketplace_error_handler)
    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
