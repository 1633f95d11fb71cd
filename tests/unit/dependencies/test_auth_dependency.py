from typing import Annotated

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from src.core.dependencies.auth import get_current_admin_user, get_current_user
from src.core.handlers import register_exception_handlers
from src.domain.entities.identity import Identity
from tests.utils.gate_helpers import make_settings


@pytest.fixture
def app():
    """Bare app without the gate: identity and locale are injected via request.state."""
    app = FastAPI()
    app.state.settings = make_settings()
    register_exception_handlers(app)
    holder = {"identity": None, "locale": "en"}

    @app.middleware("http")
    async def attach_state(request: Request, call_next):
        request.state.identity = holder["identity"]
        request.state.locale = holder["locale"]
        return await call_next(request)

    @app.get("/me")
    async def me(user: Annotated[Identity, Depends(get_current_user)]):
        return {"id": user.id}

    @app.get("/admin")
    async def admin(user: Annotated[Identity, Depends(get_current_admin_user)]):
        return {"id": user.id}

    app.state.holder = holder
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


class TestGetCurrentUser:
    def test_returns_identity(self, app, client):
        # Arrange
        app.state.holder["identity"] = Identity(id="u1")

        # Act
        response = client.get("/me")

        # Assert
        assert response.status_code == 200
        assert response.json() == {"id": "u1"}

    def test_missing_identity_raises_unauthorized(self, client):
        response = client.get("/me")

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "error": {"code": "UNAUTHORIZED", "message": "Authentication required"},
        }

    def test_message_is_localized(self, app, client):
        app.state.holder["locale"] = "id"

        response = client.get("/me")

        assert response.json()["error"]["message"] == "Autentikasi diperlukan"


class TestGetCurrentAdminUser:
    def test_admin_is_allowed(self, app, client):
        app.state.holder["identity"] = Identity(id="a1", role="admin")

        assert client.get("/admin").status_code == 200

    def test_non_admin_is_forbidden(self, app, client):
        app.state.holder["identity"] = Identity(id="m1", role="moderator")

        response = client.get("/admin")

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"
