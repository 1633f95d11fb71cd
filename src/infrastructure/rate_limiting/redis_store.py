"""Redis-backed fixed-window rate limit store.

Counters are shared through Redis so every instance of the service enforces the
same limit. Each key is a plain integer with a TTL equal to the window:

- ``INCR`` counts the request
- ``PEXPIRE`` starts the window on the first request of a window
- ``PTTL`` tells how long until the window resets

If Redis is unreachable the store logs the failure and serves the request from a
per-process :class:`InMemoryRateLimitStore`, trading accuracy for availability.
"""

from __future__ import annotations

import math
import time
from typing import Callable, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError
from structlog import get_logger

from src.domain.rate_limiting.entities import RateLimitResult
from src.domain.rate_limiting.repositories import RateLimitStore
from src.domain.rate_limiting.value_objects import RateLimitKey, RateLimitRule

from .memory_store import InMemoryRateLimitStore

logger = get_logger(__name__)


class RedisRateLimitStore(RateLimitStore):
    """Shared fixed-window counters stored in Redis."""

    def __init__(
        self,
        redis: Redis,
        key_prefix: str = "ratelimit",
        clock: Callable[[], float] = time.time,
        fallback: Optional[InMemoryRateLimitStore] = None,
    ) -> None:
        self._redis = redis
        self._key_prefix = key_prefix
        self._clock = clock
        self._fallback = fallback if fallback is not None else InMemoryRateLimitStore(clock=clock)

    def _redis_key(self, key: RateLimitKey) -> str:
        return f"{self._key_prefix}:{key.composite_key}"

    async def hit(
        self, key: RateLimitKey, rule: RateLimitRule, now: Optional[float] = None
    ) -> RateLimitResult:
        now = self._clock() if now is None else now
        redis_key = self._redis_key(key)
        window_ms = rule.window_seconds * 1000

        try:
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.incr(redis_key)
                pipe.pttl(redis_key)
                count, ttl_ms = await pipe.execute()

            count = int(count)
            ttl_ms = int(ttl_ms)
            # A negative TTL means the window was never started (first hit) or a
            # previous PEXPIRE was lost; start it now.
            if count == 1 or ttl_ms < 0:
                await self._redis.pexpire(redis_key, window_ms)
                ttl_ms = window_ms
        except (RedisError, OSError) as exc:
            logger.error("rate_limit_store_failed", key=redis_key, error=str(exc))
            return self._fallback.hit_sync(key, rule, now)

        reset_time = now + ttl_ms / 1000
        allowed = count <= rule.limit
        return RateLimitResult(
            allowed=allowed,
            limit=rule.limit,
            remaining=max(0, rule.limit - count),
            reset_time=reset_time,
            retry_after=0 if allowed else max(1, math.ceil(ttl_ms / 1000)),
        )

    async def reset(self, key: Optional[RateLimitKey] = None) -> None:
        if key is not None:
            await self._redis.delete(self._redis_key(key))
            await self._fallback.reset(key)
            return

        async for redis_key in self._redis.scan_iter(match=f"{self._key_prefix}:*"):
            await self._redis.delete(redis_key)
        await self._fallback.reset()

    async def close(self) -> None:
        await self._redis.aclose()
        logger.debug("Redis connection closed")
