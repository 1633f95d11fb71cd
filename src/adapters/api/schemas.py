from __future__ import annotations

"""Response Pydantic models for the gate-facing API routes."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from src.domain.entities.identity import Identity


class IdentityOut(BaseModel):
    """Serialised representation of :class:`~src.domain.entities.identity.Identity`."""

    id: str
    role: str
    status: str
    locale: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_entity(cls, identity: Identity) -> "IdentityOut":
        return cls(**identity.to_dict())


class SessionEnvelope(BaseModel):
    success: bool = True
    data: Optional[IdentityOut] = None


class HealthResponse(BaseModel):
    status: str
    env: str
    message: str
    locale: str
    timestamp: datetime
