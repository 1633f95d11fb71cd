from __future__ import annotations

"""Centralized, structured exception hierarchy for the marketplace gateway.

Each exception carries a machine-readable `code` (the fixed error code clients
switch on) and a human-readable, already-localized `message`. They map cleanly
to HTTP status codes in :mod:`src.core.handlers`, which renders all of them as
the same JSON envelope::

    {"success": false, "error": {"code": "...", "message": "..."}}
"""

from typing import Final

from src.utils.i18n import get_translated_message

__all__: Final = [
    "MarketplaceError",
    "RateLimitExceededError",
    "AuthenticationError",
    "PermissionError",
    "SessionResolutionError",
]


class MarketplaceError(Exception):
    """Base exception class for all custom errors in the application.

    Attributes:
        message (str): A human-readable error message, suitable for clients.
        code (str): A fixed, machine-readable error code.
    """

    message: str
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.code = code
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Operational errors (429 Too Many Requests)
# ---------------------------------------------------------------------------


class RateLimitExceededError(MarketplaceError):
    """Raised when a client exceeded the fixed-window limit of a route prefix.

    Recoverable: the client may retry after ``retry_after`` seconds. Maps to a
    `429 Too Many Requests` with a ``retry-after`` header.
    """

    def __init__(
        self,
        retry_after: int,
        message: str | None = None,
        code: str = "RATE_LIMIT_EXCEEDED",
    ):
        if message is None:
            message = get_translated_message("rate_limit_exceeded")
        self.retry_after = retry_after
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Auth-related errors
# ---------------------------------------------------------------------------


class AuthenticationError(MarketplaceError):
    """Raised when a protected API is called without a valid session.

    Recoverable by signing in. Maps to a `401 Unauthorized`.
    """

    def __init__(self, message: str | None = None, code: str = "UNAUTHORIZED"):
        if message is None:
            message = get_translated_message("authentication_required")
        super().__init__(message, code)


class PermissionError(MarketplaceError):
    """Raised when an authenticated caller lacks the role, or the account standing,
    a route requires.

    Not recoverable without a privilege change. Maps to a `403 Forbidden`.
    """

    def __init__(self, message: str | None = None, code: str = "FORBIDDEN"):
        if message is None:
            message = get_translated_message("admin_privileges_required")
        super().__init__(message, code)


class SessionResolutionError(MarketplaceError):
    """Raised when the session could not be resolved at all (resolver raised or
    timed out), as opposed to the caller simply having no session.

    Maps to a `500 Internal Server Error` for API callers.
    """

    def __init__(self, message: str | None = None, code: str = "AUTH_ERROR"):
        if message is None:
            message = get_translated_message("authentication_service_error")
        super().__init__(message, code)
