"""Main application settings and configuration management.

This module composes all the application settings from the different modules
(app, auth, redis, gate) into a single, accessible `Settings` class.

It loads settings from environment variables and .env files, validates them,
and provides a single `settings` object for use throughout the application.
All values are fixed at process start; nothing here is mutated at runtime.

Environment Support:
- Development: Uses .env
- Test: Uses .env.test
- Staging: Uses .env.staging
- Production: Uses .env.production
"""

import logging
import os
from pathlib import Path

from pydantic_settings import SettingsConfigDict

from .app import AppSettings
from .auth import AuthSettings
from .gate import GateSettings
from .redis import RedisSettings

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class Settings(AppSettings, AuthSettings, RedisSettings, GateSettings):
    """The main settings class that aggregates all application configurations.

    It inherits from all the specialized settings classes, providing a unified
    interface to all configuration parameters.

    Security Note:
        - SESSION_SECRET and REDIS_PASSWORD are secrets and must never be logged
          or exposed (OWASP A02:2021 - Cryptographic Failures).
        - Validate environment variables in production to prevent misconfiguration
          (OWASP A05:2021 - Security Misconfiguration).
    Usage:
        - Access settings via the singleton instance `settings` throughout the application.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    def validate_required_fields(self) -> None:
        """Validates deployment-sensitive combinations of settings.

        Raises:
            ValueError: If shared rate limiting is enabled in staging/production
                without a Redis password.
        """
        if (
            self.APP_ENV in ("staging", "production")
            and self.RATE_LIMIT_STORAGE == "redis"
            and not self.REDIS_PASSWORD.get_secret_value()
        ):
            error_msg = f"REDIS_PASSWORD must be set in {self.APP_ENV} environment."
            logger.error(error_msg)
            raise ValueError(error_msg)

        if self.RATE_LIMIT_ENABLED and self.RATE_LIMIT_STORAGE == "memory" and self.API_WORKERS > 1:
            logger.warning(
                "In-memory rate limiting with multiple workers: each worker keeps "
                "independent counters, so the effective limit is multiplied."
            )

        logger.info(f"Application running in {self.APP_ENV} environment")


def create_settings() -> Settings:
    """Create settings instance with environment-specific configuration.

    Returns:
        Settings: Configured settings instance
    """
    env = os.getenv("APP_ENV", "development")

    # Determine which .env file to use
    env_files = {
        "development": ".env",
        "test": ".env.test",
        "staging": ".env.staging",
        "production": ".env.production"
    }

    env_file = env_files.get(env, ".env")

    # Check if the environment-specific file exists
    if env != "development" and Path(env_file).exists():
        logger.info(f"Loading environment configuration from {env_file}")
        settings_instance = Settings(_env_file=env_file)
    elif Path(".env").exists():
        logger.info(f"Loading environment configuration from .env (environment: {env})")
        settings_instance = Settings()
    else:
        logger.warning(f"No .env file found, using environment variables only (environment: {env})")
        settings_instance = Settings()

    return settings_instance


# Create a singleton instance of the settings to be used across the application.
settings = create_settings()
settings.validate_required_fields()
