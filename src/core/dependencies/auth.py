from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Depends, Request

from src.core.exceptions import AuthenticationError, PermissionError
from src.domain.entities.identity import Identity
from src.utils.i18n import get_translated_message

__all__ = [
    "get_request_locale",
    "get_optional_identity",
    "get_current_user",
    "get_current_admin_user",
]


# ---------------------------------------------------------------------------
# Request context attached by the gate
# ---------------------------------------------------------------------------


def get_request_locale(request: Request) -> str:
    """Locale resolved by the request gate, or the default locale outside it."""
    settings = request.app.state.settings
    return getattr(request.state, "locale", settings.DEFAULT_LOCALE)


def get_optional_identity(request: Request) -> Optional[Identity]:
    """Identity attached by the gate; ``None`` when signed out or not resolved."""
    return getattr(request.state, "identity", None)


# ---------------------------------------------------------------------------
# Public dependencies
# ---------------------------------------------------------------------------


async def get_current_user(  # noqa: D401
    request: Request,
    identity: Annotated[Optional[Identity], Depends(get_optional_identity)],
) -> Identity:
    """Return the authenticated :class:`~src.domain.entities.identity.Identity`.

    The gate has already rejected unauthenticated calls to protected APIs; this
    dependency repeats the check so a route accidentally left out of the
    protected-API list still cannot be reached anonymously.
    """
    if identity is None:
        message = get_translated_message("authentication_required", get_request_locale(request))
        raise AuthenticationError(message)
    return identity


def get_current_admin_user(
    request: Request, current_user: Annotated[Identity, Depends(get_current_user)]
) -> Identity:  # noqa: D401
    """Ensure the authenticated user has an admin role."""
    settings = request.app.state.settings
    if not current_user.is_admin(settings.ADMIN_ROLES):
        message = get_translated_message("admin_privileges_required", get_request_locale(request))
        raise PermissionError(message)
    return current_user
