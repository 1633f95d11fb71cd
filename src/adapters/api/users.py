from typing import Annotated

from fastapi import APIRouter, Depends

from src.core.dependencies.auth import get_current_user
from src.domain.entities.identity import Identity

from .schemas import IdentityOut, SessionEnvelope

router = APIRouter()


@router.get("/profile", response_model=SessionEnvelope)
async def read_profile(current_user: Annotated[Identity, Depends(get_current_user)]):
    """Return the identity the gate attached to this protected request."""
    return SessionEnvelope(data=IdentityOut.from_entity(current_user))
