"""Middleware configuration for the FastAPI application.

This module handles the registration of the request gate and CORS.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.core.config.settings import Settings
from src.core.gate import RequestGate, RouteTable
from src.domain.interfaces.session import ISessionResolver
from src.domain.rate_limiting.repositories import RateLimitStore


def configure_middleware(
    app: FastAPI,
    settings: Settings,
    store: RateLimitStore,
    session_resolver: ISessionResolver,
) -> RequestGate:
    """Configure all middleware for the FastAPI application.

    Args:
        app (FastAPI): The FastAPI application instance
        settings: Settings the route table and gate are built from
        store: Rate-limit counter store injected into the gate
        session_resolver: Session resolver injected into the gate

    Returns:
        RequestGate: The registered gate, also stored on ``app.state.gate``.
    """
    gate = RequestGate(
        settings=settings,
        route_table=RouteTable.from_settings(settings),
        store=store,
        session_resolver=session_resolver,
    )
    app.state.gate = gate
    app.middleware("http")(gate)

    # Added last so it runs first: gate denials still carry CORS headers.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["retry-after", "x-locale", "x-ratelimit-limit", "x-ratelimit-remaining"],
    )
    return gate
