"""Rate Limiting Domain

Fixed-window rate limiting keyed by client identifier and route prefix:

- Value Objects: RateLimitRule, RateLimitKey
- Entities: RateLimitEntry, RateLimitResult
- Repositories: RateLimitStore (implemented in the infrastructure layer)
"""

from .entities import RateLimitEntry, RateLimitResult
from .repositories import RateLimitStore
from .value_objects import RateLimitKey, RateLimitRule

__all__ = [
    "RateLimitRule",
    "RateLimitKey",
    "RateLimitEntry",
    "RateLimitResult",
    "RateLimitStore",
]
