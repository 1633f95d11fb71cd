from urllib.parse import parse_qs, urlsplit

import pytest

from src.domain.entities.identity import Identity
from src.domain.rate_limiting.value_objects import RateLimitKey
from tests.utils.gate_helpers import StubSessionResolver


def _location(response):
    parts = urlsplit(response.headers["location"])
    return parts.path, parse_qs(parts.query)


class TestRateLimiting:
    def test_request_over_limit_is_rejected_with_retry_after(self, client, clock):
        # Arrange: "/api" allows 3 requests per minute
        for _ in range(3):
            assert client.get("/api/health").status_code == 200

        # Act
        response = client.get("/api/health")

        # Assert
        assert response.status_code == 429
        assert response.json() == {
            "success": False,
            "error": {
                "code": "RATE_LIMIT_EXCEEDED",
                "message": "Too many requests. Please try again later.",
            },
        }
        assert response.headers["retry-after"] == "60"
        assert response.headers["x-ratelimit-remaining"] == "0"

    def test_retry_after_tracks_time_until_reset(self, client, clock):
        for _ in range(3):
            client.get("/api/health")
        clock.advance(20)

        response = client.get("/api/health")

        assert response.status_code == 429
        assert response.headers["retry-after"] == "40"

    def test_client_allowed_again_after_window_with_counter_reset(self, client, clock, store):
        for _ in range(4):
            client.get("/api/health")
        clock.advance(61)

        response = client.get("/api/health")

        assert response.status_code == 200
        assert store.get_entry(RateLimitKey("unknown", "/api")).count == 1

    def test_clients_are_counted_independently(self, client):
        for _ in range(3):
            client.get("/api/health", headers={"x-forwarded-for": "10.0.0.1"})
        blocked = client.get("/api/health", headers={"x-forwarded-for": "10.0.0.1, 172.16.0.1"})

        other = client.get("/api/health", headers={"x-forwarded-for": "10.0.0.2"})

        assert blocked.status_code == 429
        assert other.status_code == 200
        assert other.headers["x-ratelimit-remaining"] == "2"

    def test_longest_prefix_rule_applies(self, client):
        # "/api/auth" allows 2 per 15 minutes and has its own counter
        client.get("/api/auth/session")
        client.get("/api/auth/session")

        response = client.get("/api/auth/session")

        assert response.status_code == 429
        assert response.headers["retry-after"] == str(15 * 60)
        assert client.get("/api/health").status_code == 200

    def test_rate_limiting_precedes_authentication(self, client):
        for _ in range(3):
            assert client.get("/api/users/profile").status_code == 401

        response = client.get("/api/users/profile")

        assert response.status_code == 429

    def test_disabled_rate_limiting_never_rejects(self, build_client, gate_settings):
        settings = gate_settings.model_copy(update={"RATE_LIMIT_ENABLED": False})
        client = build_client(settings=settings)

        statuses = {client.get("/api/health").status_code for _ in range(10)}

        assert statuses == {200}

    def test_page_paths_are_not_rate_limited(self, client):
        statuses = {client.get("/listings").status_code for _ in range(10)}

        assert statuses == {200}


class TestApiAuthentication:
    def test_missing_session_returns_unauthorized(self, client):
        response = client.get("/api/users/profile")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"
        assert response.headers["x-frame-options"] == "DENY"

    def test_error_message_follows_locale_cookie(self, client):
        response = client.get("/api/users/profile", headers={"cookie": "locale=id"})

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Autentikasi diperlukan"
        assert response.headers["x-locale"] == "id"

    def test_authenticated_user_reaches_handler_with_identity(self, build_client, user_identity):
        client = build_client(session_resolver=StubSessionResolver(identity=user_identity))

        response = client.get("/api/users/profile")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == "user-1"
        assert response.headers["x-user-id"] == "user-1"
        assert response.headers["x-user-role"] == "user"
        assert response.headers["x-user-locale"] == "id"
        assert response.headers["x-content-type-options"] == "nosniff"

    def test_non_admin_on_admin_api_is_forbidden(self, build_client, moderator_identity):
        client = build_client(session_resolver=StubSessionResolver(identity=moderator_identity))

        response = client.get("/api/admin/session")

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    def test_admin_on_admin_api_is_allowed(self, build_client, admin_identity):
        client = build_client(session_resolver=StubSessionResolver(identity=admin_identity))

        response = client.get("/api/admin/session")

        assert response.status_code == 200
        assert response.json()["data"]["role"] == "admin"

    def test_suspended_account_is_forbidden(self, build_client, suspended_identity):
        client = build_client(session_resolver=StubSessionResolver(identity=suspended_identity))

        response = client.get("/api/users/profile")

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Your account has been suspended"

    def test_resolver_failure_returns_auth_error(self, build_client):
        client = build_client(session_resolver=StubSessionResolver(error=RuntimeError("cache down")))

        response = client.get("/api/users/profile")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "AUTH_ERROR"

    def test_resolver_timeout_returns_auth_error(self, build_client):
        client = build_client(session_resolver=StubSessionResolver(delay=1.0))

        response = client.get("/api/users/profile")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "AUTH_ERROR"

    def test_public_api_does_not_resolve_session(self, build_client):
        resolver = StubSessionResolver(error=RuntimeError("must not be called"))
        client = build_client(session_resolver=resolver)

        response = client.get("/api/health")

        assert response.status_code == 200
        assert resolver.calls == 0


class TestPageAuthorization:
    def test_protected_page_without_session_redirects_to_sign_in(self, client):
        response = client.get("/dashboard?tab=listings")

        assert response.status_code == 307
        path, query = _location(response)
        assert path == "/auth/signin"
        assert query["callbackUrl"] == ["http://testserver/dashboard?tab=listings"]

    def test_sign_in_redirect_keeps_locale(self, client):
        response = client.get("/id/messages")

        path, query = _location(response)
        assert path == "/id/auth/signin"
        assert query["callbackUrl"] == ["http://testserver/id/messages"]

    def test_sign_in_redirect_wins_over_locale_canonicalization(self, client):
        response = client.get("/en/dashboard")

        path, _ = _location(response)
        assert path == "/auth/signin"

    def test_moderator_on_admin_page_is_denied(self, build_client, moderator_identity):
        client = build_client(session_resolver=StubSessionResolver(identity=moderator_identity))

        response = client.get("/admin/users")

        assert response.status_code == 307
        path, query = _location(response)
        assert path == "/auth/error"
        assert query["error"] == ["AccessDenied"]

    def test_admin_reaches_admin_page(self, build_client, admin_identity):
        client = build_client(session_resolver=StubSessionResolver(identity=admin_identity))

        response = client.get("/admin/users")

        assert response.status_code == 200
        assert response.json()["user_id"] == "admin-1"
        assert response.headers["x-user-role"] == "admin"

    def test_suspended_account_on_protected_page(self, build_client, suspended_identity):
        client = build_client(session_resolver=StubSessionResolver(identity=suspended_identity))

        response = client.get("/id/dashboard")

        path, query = _location(response)
        assert path == "/id/auth/error"
        assert query["error"] == ["AccountSuspended"]

    @pytest.mark.parametrize("failing_resolver", [
        StubSessionResolver(error=RuntimeError("cache down")),
        StubSessionResolver(delay=1.0),
    ])
    def test_resolver_failure_on_page_is_treated_as_signed_out(self, build_client, failing_resolver):
        client = build_client(session_resolver=failing_resolver)

        response = client.get("/dashboard")

        assert response.status_code == 307
        path, _ = _location(response)
        assert path == "/auth/signin"

    def test_longest_prefix_classifies_nested_protected_path(self, client):
        # "/listings" is public but "/listings/my" is protected
        assert client.get("/listings/123").status_code == 200
        assert client.get("/listings/my").status_code == 307

    def test_resolver_called_once_per_request(self, build_client, user_identity):
        resolver = StubSessionResolver(identity=user_identity)
        client = build_client(session_resolver=resolver)

        client.get("/dashboard")

        assert resolver.calls == 1

    def test_non_ascii_user_id_is_passed_through(self, build_client):
        identity = Identity(id="用户-7", role="user", status="active")
        client = build_client(session_resolver=StubSessionResolver(identity=identity))

        response = client.get("/listings")

        assert response.status_code == 200
        assert response.json()["user_id"] == "用户-7"
        assert response.headers["x-user-id"] == "%E7%94%A8%E6%88%B7-7"


class TestAuthPagesRedirect:
    @pytest.mark.parametrize("path, expected", [
        ("/auth/signin", "/"),
        ("/auth/signup", "/"),
        ("/en/auth/signin", "/"),
        ("/id/auth/signin", "/id"),
    ])
    def test_authenticated_user_is_sent_to_landing_page(self, build_client, user_identity, path, expected):
        client = build_client(session_resolver=StubSessionResolver(identity=user_identity))

        response = client.get(path)

        assert response.status_code == 307
        assert response.headers["location"] == expected

    def test_anonymous_user_sees_sign_in_page(self, client):
        response = client.get("/auth/signin")

        assert response.status_code == 200


class TestLocaleNormalization:
    def test_default_locale_segment_is_stripped(self, client):
        response = client.get("/en/listings?page=2")

        assert response.status_code == 307
        assert response.headers["location"] == "/listings?page=2"

    def test_default_locale_root_is_stripped(self, client):
        response = client.get("/en")

        assert response.headers["location"] == "/"

    def test_accept_language_adds_locale_segment(self, client):
        response = client.get("/listings", headers={"accept-language": "id,en;q=0.8"})

        assert response.status_code == 307
        assert response.headers["location"] == "/id/listings"

    def test_first_supported_language_tag_wins(self, client):
        response = client.get("/listings", headers={"accept-language": "fr-FR, en-US, id"})

        assert response.status_code == 200
        assert response.headers["x-locale"] == "en"

    def test_locale_cookie_precedes_accept_language(self, client):
        response = client.get("/search", headers={"accept-language": "en", "cookie": "locale=id"})

        assert response.headers["location"] == "/id/search"

    def test_non_default_segment_passes_through_rewritten(self, client):
        response = client.get("/id/listings")

        assert response.status_code == 200
        assert response.json() == {
            "path": "/listings",
            "raw_path": "/listings",
            "locale": "id",
            "user_id": None,
        }
        assert response.headers["x-locale"] == "id"
        assert "locale=id" in response.headers["set-cookie"]

    def test_rewritten_raw_path_keeps_percent_encoding(self, client):
        response = client.get("/id/caf%C3%A9/a%2Fb")

        assert response.status_code == 200
        assert response.json()["raw_path"] == "/caf%C3%A9/a%2Fb"

    def test_stripped_default_locale_never_yields_protocol_relative_location(self, client):
        response = client.get("/en//other-host/x?next=1")

        assert response.status_code == 307
        assert response.headers["location"] == "/other-host/x?next=1"

    def test_pass_through_applies_security_headers(self, client):
        response = client.get("/listings")

        assert response.headers["x-frame-options"] == "DENY"
        assert response.headers["referrer-policy"] == "strict-origin-when-cross-origin"
        assert response.headers["x-xss-protection"] == "1; mode=block"
        assert "default-src 'self'" in response.headers["content-security-policy"]
        assert "strict-transport-security" not in response.headers


class TestBypass:
    @pytest.mark.parametrize("path", [
        "/favicon.ico",
        "/robots.txt",
        "/images/logo.png",
        "/_next/static/chunk",
        "/api/auth/callback/google",
        "/api/export.csv",
        "/en/listings/photo.jpg",
        "/v1.2/dashboard",
    ])
    def test_bypassed_paths_skip_the_gate(self, build_client, store, path):
        resolver = StubSessionResolver(error=RuntimeError("must not be called"))
        client = build_client(session_resolver=resolver)

        for _ in range(5):
            response = client.get(path)
            assert response.status_code == 200

        assert resolver.calls == 0
        assert len(store) == 0
        assert "x-frame-options" not in response.headers
        assert "x-locale" not in response.headers


class TestSessionEndpoint:
    def test_signed_out_session_is_null(self, client):
        response = client.get("/api/auth/session")

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": None}

    def test_signed_in_session_is_returned(self, build_client, user_identity):
        client = build_client(session_resolver=StubSessionResolver(identity=user_identity))

        response = client.get("/api/auth/session")

        assert response.json()["data"]["email"] == "user@example.com"


def test_production_adds_hsts(build_client, gate_settings):
    settings = gate_settings.model_copy(update={"APP_ENV": "production"})
    client = build_client(settings=settings)

    response = client.get("/listings")

    assert response.headers["strict-transport-security"].startswith("max-age=")


def test_lifespan_closes_store(build_client, store, mocker):
    close = mocker.patch.object(store, "close", new=mocker.AsyncMock())
    client = build_client()

    with client:
        assert client.get("/api/health").status_code == 200

    close.assert_awaited_once()
