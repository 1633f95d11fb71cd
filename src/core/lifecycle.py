"""Application lifecycle management.

This module handles application startup and shutdown events, ensuring proper
initialization and cleanup of application resources.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.core.logging import logger


def create_lifespan_manager():
    """Create the application lifespan manager.

    Returns:
        AsyncContextManager: The lifespan manager for the FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager that handles startup and shutdown events.

        The rate-limit store is created with the application (the gate needs it
        at registration time); it is closed here on shutdown so a Redis
        connection pool is released cleanly.

        Args:
            app (FastAPI): The FastAPI application instance
        """
        # Startup
        settings = app.state.settings
        logger.info(
            "application_startup",
            env=settings.APP_ENV,
            version=settings.VERSION,
            rate_limit_storage=settings.RATE_LIMIT_STORAGE,
            rate_limit_enabled=settings.RATE_LIMIT_ENABLED,
        )

        yield

        # Shutdown
        await app.state.rate_limit_store.close()
        logger.info("application_shutdown", env=settings.APP_ENV)

    return lifespan
