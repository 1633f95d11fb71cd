from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.core.dependencies.auth import get_request_locale
from src.utils.i18n import get_translated_message

from .schemas import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
async def health_check(request: Request, locale: Annotated[str, Depends(get_request_locale)]):
    """
    Liveness endpoint. Public and rate limited under the ``/api`` prefix.
    """
    settings = request.app.state.settings
    return HealthResponse(
        status="ok",
        env=settings.APP_ENV,
        message=get_translated_message("health_status_ok", locale),
        locale=locale,
        timestamp=datetime.now(timezone.utc),
    )
