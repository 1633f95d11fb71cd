"""In-process fixed-window rate limit store.

Counters live in a dictionary owned by the store instance (not module state), so
each application, and each test, gets an independent set of counters.

The store is only correct for a single process. Every worker or instance keeps
its own map, so a deployment with N processes admits up to N times the limit.
Use :class:`~src.infrastructure.rate_limiting.redis_store.RedisRateLimitStore`
when counters must be shared.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Optional

from structlog import get_logger

from src.domain.rate_limiting.entities import RateLimitEntry, RateLimitResult
from src.domain.rate_limiting.repositories import RateLimitStore
from src.domain.rate_limiting.value_objects import RateLimitKey, RateLimitRule

logger = get_logger(__name__)

# Expired entries are swept once the map grows past this many keys.
DEFAULT_MAX_ENTRIES = 10_000


class InMemoryRateLimitStore(RateLimitStore):
    """Fixed-window counters kept in a lock-guarded dictionary.

    The lock makes increment-and-compare a critical section, so the store stays
    correct when requests are served from several threads (e.g. sync routes run
    in the threadpool, or a free-threaded interpreter).
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()
        self._clock = clock
        self._max_entries = max_entries

    def __len__(self) -> int:
        return len(self._entries)

    def hit_sync(
        self, key: RateLimitKey, rule: RateLimitRule, now: Optional[float] = None
    ) -> RateLimitResult:
        """Synchronous core of :meth:`hit`, shared with the Redis fallback path."""
        now = self._clock() if now is None else now
        composite = key.composite_key

        with self._lock:
            entry = self._entries.get(composite)
            if entry is None or entry.is_expired(now):
                entry = RateLimitEntry.start(rule, now)
                self._entries[composite] = entry
                allowed = True
                if len(self._entries) > self._max_entries:
                    self._sweep_expired(now)
            else:
                allowed = entry.hit(rule)
            return RateLimitResult.from_entry(entry, rule, allowed, now)

    async def hit(
        self, key: RateLimitKey, rule: RateLimitRule, now: Optional[float] = None
    ) -> RateLimitResult:
        return self.hit_sync(key, rule, now)

    async def reset(self, key: Optional[RateLimitKey] = None) -> None:
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key.composite_key, None)

    def get_entry(self, key: RateLimitKey) -> Optional[RateLimitEntry]:
        """Return the current entry for ``key`` (mainly for diagnostics and tests)."""
        return self._entries.get(key.composite_key)

    def _sweep_expired(self, now: float) -> None:
        # Caller holds the lock.
        expired = [k for k, entry in self._entries.items() if entry.is_expired(now)]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.debug("rate_limit_entries_swept", removed=len(expired), remaining=len(self._entries))
