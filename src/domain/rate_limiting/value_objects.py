"""
Rate Limiting Value Objects

Immutable value objects representing core concepts in the rate limiting domain.

Value Objects:
- RateLimitRule: Fixed-window limit (request count per window) for a route prefix
- RateLimitKey: Identification of one counter, ``(client_identifier, route_prefix)``

Design Principles:
- Immutability: All value objects are immutable after creation
- Validation: Business rules enforced at construction time
- Equality: Value-based equality for proper hashing and comparison
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_PERIOD_SECONDS = {
    "second": 1,
    "minute": 60,
    "hour": 60 * 60,
    "day": 24 * 60 * 60,
}

# "60/minute", "20/15minute", "5 / hour", "100/seconds"
_RULE_PATTERN = re.compile(r"^\s*(\d+)\s*/\s*(\d*)\s*(second|minute|hour|day)s?\s*$")


@dataclass(frozen=True, slots=True)
class RateLimitRule:
    """
    Fixed-window rate-limit parameters for one route prefix.

    Business Rules:
    - ``limit`` is the number of requests admitted per window and must be positive
    - ``window_seconds`` must be positive
    """

    limit: int
    window_seconds: int

    def __post_init__(self):
        if self.limit <= 0:
            raise ValueError("Rate limit count must be a positive integer.")
        if self.window_seconds <= 0:
            raise ValueError("Rate limit window must be a positive number of seconds.")

    @classmethod
    def parse(cls, value: str) -> RateLimitRule:
        """Parse a ``count/period`` string such as ``"60/minute"`` or ``"20/15minute"``.

        Raises:
            ValueError: If the string is not in ``count/[multiplier]period`` form.
        """
        match = _RULE_PATTERN.match(value or "")
        if match is None:
            raise ValueError(
                f"Invalid rate limit format: {value!r}. Must be 'count/period' "
                "with period second, minute, hour or day."
            )
        count, multiplier, period = match.groups()
        return cls(
            limit=int(count),
            window_seconds=int(multiplier or 1) * _PERIOD_SECONDS[period],
        )

    def __str__(self) -> str:
        return f"{self.limit}/{self.window_seconds}s"


@dataclass(frozen=True, slots=True)
class RateLimitKey:
    """
    Identifies one fixed-window counter.

    Counters are kept per client and per route prefix, so two clients hitting the
    same prefix, or one client hitting two prefixes, never share a counter.
    """

    client_id: str
    prefix: str

    def __post_init__(self):
        if not self.client_id:
            raise ValueError("client_id must not be empty")
        if not self.prefix.startswith("/"):
            raise ValueError("prefix must be a path prefix starting with '/'")

    @property
    def composite_key(self) -> str:
        return f"{self.client_id}:{self.prefix}"

    def __str__(self) -> str:
        return self.composite_key
