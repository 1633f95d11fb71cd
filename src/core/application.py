"""Application factory for creating and configuring the FastAPI application.

This module provides a factory function to create a properly configured FastAPI application
with the request gate, exception handlers, and routers registered.
"""

from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from src.adapters.api import api_router
from src.core.config.settings import Settings, settings as default_settings
from src.core.lifecycle import create_lifespan_manager
from src.core.middleware import configure_middleware
from src.core.handlers import register_exception_handlers
from src.domain.interfaces.session import ISessionResolver
from src.domain.rate_limiting.repositories import RateLimitStore
from src.infrastructure.rate_limiting import create_rate_limit_store
from src.infrastructure.services.session_resolver import JWTSessionResolver


def create_application(
    settings: Optional[Settings] = None,
    store: Optional[RateLimitStore] = None,
    session_resolver: Optional[ISessionResolver] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The rate-limit store and session resolver are injected into the gate; when
    omitted they are built from settings.

    Args:
        settings: Settings to use instead of the process-wide singleton.
        store: Counter store for the rate limiter.
        session_resolver: Resolver turning a request into an identity.

    Returns:
        FastAPI: The configured FastAPI application instance
    """
    settings = settings or default_settings
    if store is None:
        store = create_rate_limit_store(settings)
    session_resolver = session_resolver or JWTSessionResolver(settings)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Request gate for the localized classifieds marketplace.",
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url=None,
        openapi_url="/api/openapi.json" if settings.DEBUG else None,
        lifespan=create_lifespan_manager(),
        default_response_class=JSONResponse,
    )
    app.state.settings = settings
    app.state.rate_limit_store = store
    app.state.session_resolver = session_resolver

    # Configure middleware
    configure_middleware(app, settings, store, session_resolver)

    # Register exception handlers
    register_exception_handlers(app)

    # Include routers
    app.include_router(api_router, prefix=settings.API_PREFIX)

    return app
