"""Rate Limiting Domain Entities

Entities:
- RateLimitEntry: The mutable counter state of one key inside a fixed window
- RateLimitResult: Outcome of a single hit against a store
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict

from .value_objects import RateLimitRule


@dataclass
class RateLimitEntry:
    """Counter state for one ``(client_identifier, route_prefix)`` key.

    Business Rules:
    - Created on the first request for a key with ``count = 1``
    - Whenever the current time exceeds ``reset_time`` the entry restarts with
      ``count = 1`` and ``reset_time = now + window``
    - A hit that finds ``count >= limit`` inside the window is rejected and does
      not increment the counter
    """

    count: int
    reset_time: float

    @classmethod
    def start(cls, rule: RateLimitRule, now: float) -> RateLimitEntry:
        return cls(count=1, reset_time=now + rule.window_seconds)

    def is_expired(self, now: float) -> bool:
        return now > self.reset_time

    def hit(self, rule: RateLimitRule) -> bool:
        """Register one request inside the current window.

        Returns:
            True if the request is admitted, False if the limit is already reached.
        """
        if self.count >= rule.limit:
            return False
        self.count += 1
        return True


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limiting check, with everything the HTTP layer needs."""

    allowed: bool
    limit: int
    remaining: int
    reset_time: float
    retry_after: int = 0

    @property
    def is_blocked(self) -> bool:
        return not self.allowed

    @staticmethod
    def seconds_until(reset_time: float, now: float) -> int:
        """Whole seconds until ``reset_time``, never less than one."""
        return max(1, math.ceil(reset_time - now))

    @classmethod
    def from_entry(
        cls, entry: RateLimitEntry, rule: RateLimitRule, allowed: bool, now: float
    ) -> RateLimitResult:
        return cls(
            allowed=allowed,
            limit=rule.limit,
            remaining=max(0, rule.limit - entry.count),
            reset_time=entry.reset_time,
            retry_after=0 if allowed else cls.seconds_until(entry.reset_time, now),
        )

    def to_http_headers(self) -> Dict[str, str]:
        """Convert result to HTTP headers.

        - x-ratelimit-limit: The rate limit ceiling for the route prefix
        - x-ratelimit-remaining: The number of requests left in the window
        - x-ratelimit-reset: Unix timestamp at which the window resets
        - retry-after: Seconds to wait (only when blocked)
        """
        headers = {
            "x-ratelimit-limit": str(self.limit),
            "x-ratelimit-remaining": str(max(0, self.remaining)),
            "x-ratelimit-reset": str(math.ceil(self.reset_time)),
        }
        if self.is_blocked:
            headers["retry-after"] = str(self.retry_after)
        return headers
