"""
Rate Limiting Domain Repositories

Repository interface for fixed-window counter storage. Implementations decide
where counters live (process memory, Redis) but must all honour the same window
semantics described on :class:`~src.domain.rate_limiting.entities.RateLimitEntry`.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .entities import RateLimitResult
from .value_objects import RateLimitKey, RateLimitRule


class RateLimitStore(ABC):
    """
    Repository interface for rate limit counters.

    The increment-and-compare performed by :meth:`hit` is a critical section:
    implementations must make it atomic for their backing store.
    """

    @abstractmethod
    async def hit(
        self, key: RateLimitKey, rule: RateLimitRule, now: Optional[float] = None
    ) -> RateLimitResult:
        """
        Count one request against ``key`` and report whether it is admitted.

        Args:
            key: The ``(client, prefix)`` counter to increment
            rule: Limit and window enforced for the prefix
            now: Current Unix time; defaults to the store's clock

        Returns:
            RateLimitResult describing the decision and the window state
        """

    @abstractmethod
    async def reset(self, key: Optional[RateLimitKey] = None) -> None:
        """
        Drop the counter for ``key``, or every counter when ``key`` is None.
        """

    async def close(self) -> None:
        """Release any connection held by the store."""
        return None
