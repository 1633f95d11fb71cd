"""
Redis and rate-limit storage settings.
"""
from pydantic import Field, field_validator, ValidationInfo, SecretStr
from pydantic_settings import BaseSettings
import logging

logger = logging.getLogger(__name__)


class RedisSettings(BaseSettings):
    """
    Defines settings for the Redis connection backing the shared rate-limit counters.

    Security Note:
        - REDIS_PASSWORD must be set in production to prevent unauthorized access
          (OWASP A05:2021 - Security Misconfiguration).
        - Use rediss:// (REDIS_SSL=true) when Redis is reached over an untrusted network.
    Performance Note:
        - RATE_LIMIT_STORAGE="memory" keeps counters inside one process. Every
          additional worker or instance keeps its own counters, multiplying the
          effective limit. Use "redis" for any multi-instance deployment.
    """
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = Field(ge=1, le=65535, default=6379)
    REDIS_PASSWORD: SecretStr = SecretStr("")
    REDIS_SSL: bool = False
    REDIS_URL: str = Field(default="", validate_default=True)

    # Rate limiting settings
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE: str = Field(default="memory", pattern="^(memory|redis)$")
    RATE_LIMIT_KEY_PREFIX: str = "ratelimit"

    @field_validator("REDIS_URL", mode="before")
    @classmethod
    def assemble_redis_url(cls, v: str | None, info: ValidationInfo) -> str:
        """
        Assembles the Redis connection URL if not provided explicitly.

        Args:
            v: Explicitly provided URL or None.
            info: Validation context with other field values.

        Returns:
            Assembled or provided Redis URL.
        """
        if v:
            return v

        values = info.data
        protocol = "rediss" if values.get("REDIS_SSL") else "redis"
        redis_password = values.get("REDIS_PASSWORD")
        secret = redis_password.get_secret_value() if redis_password else ""
        password = f":{secret}@" if secret else ""

        url = f"{protocol}://{password}{values.get('REDIS_HOST')}:{values.get('REDIS_PORT')}/0"
        logger.debug("Assembled REDIS_URL (password masked for security).")
        return url

