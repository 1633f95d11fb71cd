"""Infrastructure Services.

Concrete implementations of domain interfaces.
"""

from .session_resolver import JWTSessionResolver

__all__ = ["JWTSessionResolver"]
