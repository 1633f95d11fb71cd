"""Session resolution interface.

The request gate depends on this abstraction only, so the session mechanism
(signed cookie, opaque token plus cache lookup, ...) can change without touching
the gate.
"""

from abc import ABC, abstractmethod
from typing import Optional

from starlette.requests import Request

from src.domain.entities.identity import Identity


class ISessionResolver(ABC):
    """Interface for resolving the caller's identity from a request.

    Contract:
    - Return an :class:`Identity` when the request carries a valid session.
    - Return ``None`` when it carries none, or one that is expired or invalid.
      ``None`` is the normal "signed out" answer, not an error.
    - Raise only when resolution itself failed (a backing store is down, the
      configuration is broken). The gate treats that as a resolution failure,
      which is distinct from "signed out".
    """

    @abstractmethod
    async def resolve(self, request: Request) -> Optional[Identity]:
        """Resolve the identity carried by ``request``.

        Args:
            request: The incoming request; only headers and cookies are read.

        Returns:
            The authenticated identity, or ``None`` when there is no valid session.
        """
        raise NotImplementedError
