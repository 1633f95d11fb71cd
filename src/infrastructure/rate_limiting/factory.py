"""Factory selecting the rate limit store configured for this deployment."""

from typing import Optional

from structlog import get_logger

from src.core.config.settings import Settings, settings as default_settings
from src.domain.rate_limiting.repositories import RateLimitStore
from src.infrastructure.redis import create_redis_client

from .memory_store import InMemoryRateLimitStore
from .redis_store import RedisRateLimitStore

logger = get_logger(__name__)


def create_rate_limit_store(settings: Optional[Settings] = None) -> RateLimitStore:
    """Build the store named by ``RATE_LIMIT_STORAGE``.

    Returns:
        RateLimitStore: ``RedisRateLimitStore`` for ``redis``, otherwise an
        ``InMemoryRateLimitStore`` (single-instance semantics).
    """
    settings = settings or default_settings
    if settings.RATE_LIMIT_STORAGE == "redis":
        logger.info("rate_limit_store_selected", backend="redis")
        return RedisRateLimitStore(
            create_redis_client(settings), key_prefix=settings.RATE_LIMIT_KEY_PREFIX
        )

    logger.info("rate_limit_store_selected", backend="memory")
    return InMemoryRateLimitStore()
