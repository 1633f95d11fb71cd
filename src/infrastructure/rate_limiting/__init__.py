"""Rate limit counter stores and the factory selecting one from settings."""

from .factory import create_rate_limit_store
from .memory_store import InMemoryRateLimitStore
from .redis_store import RedisRateLimitStore

__all__ = [
    "InMemoryRateLimitStore",
    "RedisRateLimitStore",
    "create_rate_limit_store",
]
