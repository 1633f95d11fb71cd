import os

# Settings are read once at import time, so the environment is seeded first.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("SESSION_SECRET", "test-session-secret-that-is-long-enough-0123456789")
os.environ.setdefault("RATE_LIMIT_STORAGE", "memory")
os.environ.setdefault("LOG_JSON", "false")

import pytest
from fastapi.testclient import TestClient

from src.core.application import create_application
from src.domain.entities.identity import Identity
from src.infrastructure.rate_limiting import InMemoryRateLimitStore
from tests.utils.gate_helpers import (
    FakeClock,
    StubSessionResolver,
    add_page_echo_route,
    make_settings,
)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemoryRateLimitStore(clock=clock)


@pytest.fixture
def resolver():
    return StubSessionResolver()


@pytest.fixture
def user_identity():
    return Identity(id="user-1", role="user", status="active", locale="id", email="user@example.com")


@pytest.fixture
def moderator_identity():
    return Identity(id="mod-1", role="moderator", status="active")


@pytest.fixture
def admin_identity():
    return Identity(id="admin-1", role="admin", status="active")


@pytest.fixture
def suspended_identity():
    return Identity(id="user-2", role="user", status="suspended")


@pytest.fixture
def gate_settings():
    return make_settings(
        RATE_LIMIT_ENABLED=True,
        RATE_LIMIT_RULES={"/api": "3/minute", "/api/auth": "2/15minute", "/api/admin": "5/minute"},
        SESSION_RESOLVE_TIMEOUT_SECONDS=0.2,
    )


@pytest.fixture
def build_client(gate_settings, store, resolver):
    """Factory building a TestClient around a fresh application."""

    def _build(settings=None, session_resolver=None, rate_limit_store=None):
        app = create_application(
            settings=settings or gate_settings,
            store=store if rate_limit_store is None else rate_limit_store,
            session_resolver=session_resolver or resolver,
        )
        add_page_echo_route(app)
        return TestClient(app, follow_redirects=False)

    return _build


@pytest.fixture
def client(build_client):
    return build_client()
