"""Domain Interfaces for dependency inversion.

The gate depends on these contracts only; infrastructure provides the
implementations (see :mod:`src.infrastructure.services`).
"""

from .session import ISessionResolver

__all__ = ["ISessionResolver"]
