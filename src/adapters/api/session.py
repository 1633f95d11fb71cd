"""Session introspection for browser clients.

``/api/auth/session`` is public, so the gate does not resolve a session for it.
The route asks the configured resolver itself and answers ``data: null`` when
the caller is signed out.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from structlog import get_logger

from src.core.dependencies.auth import get_request_locale
from src.core.exceptions import SessionResolutionError
from src.utils.i18n import get_translated_message

from .schemas import IdentityOut, SessionEnvelope

logger = get_logger(__name__)

router = APIRouter()


@router.get("/session", response_model=SessionEnvelope)
async def read_session(request: Request, locale: Annotated[str, Depends(get_request_locale)]):
    identity = getattr(request.state, "identity", None)
    if identity is None:
        resolver = request.app.state.session_resolver
        try:
            identity = await resolver.resolve(request)
        except Exception as exc:
            logger.error("session_resolution_failed", surface="api", path=request.url.path, error=str(exc))
            raise SessionResolutionError(
                get_translated_message("authentication_service_error", locale)
            ) from exc

    if identity is None:
        return SessionEnvelope(data=None)
    return SessionEnvelope(data=IdentityOut.from_entity(identity))
