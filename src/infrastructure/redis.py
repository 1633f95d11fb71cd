"""
Redis Connection Module

This module provides the asynchronous Redis client used for shared rate-limit counters.

**Security Note**: Ensure that the Redis connection URL (REDIS_URL) uses TLS (rediss://) if
connecting over an insecure network to prevent data interception (OWASP A02:2021 - Cryptographic
Failures). Avoid logging connection details that include passwords.

Functions:
    create_redis_client: Builds a client from the application settings.
"""

from typing import Optional

from redis.asyncio import Redis
import logging

from src.core.config.settings import Settings, settings as default_settings

# Configure logging for Redis connection events
logger = logging.getLogger(__name__)


def create_redis_client(settings: Optional[Settings] = None) -> Redis:
    """
    Creates an asynchronous Redis client from the application settings.

    The client connects lazily on first command, so creating it never blocks
    application startup. The caller owns the client and must ``aclose()`` it.

    Returns:
        Redis: An asynchronous Redis client instance.
    """
    settings = settings or default_settings
    redis = Redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)
    logger.debug("Redis client created")
    return redis
