from typing import Annotated

from fastapi import APIRouter, Depends

from src.core.dependencies.auth import get_current_admin_user
from src.domain.entities.identity import Identity

from .schemas import IdentityOut, SessionEnvelope

router = APIRouter()


@router.get("/session", response_model=SessionEnvelope)
async def read_admin_session(current_admin: Annotated[Identity, Depends(get_current_admin_user)]):
    """Return the admin identity; the gate has already enforced the admin role."""
    return SessionEnvelope(data=IdentityOut.from_entity(current_admin))
