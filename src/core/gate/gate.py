"""The request gate: locale, rate limiting and access control before any handler runs.

Every non-bypassed request is evaluated in a fixed order:

1. Bypass check (framework assets, auth callbacks, well-known files, any dotted path)
2. Rate limiting, API paths only
3. Session check for protected APIs (401 / 403 / 500 JSON envelopes)
4. Locale resolution for pages (URL segment, cookie, Accept-Language, default)
5. Protected and admin page authorization (redirects)
6. Authenticated users are sent away from the sign-in and sign-up pages
7. Locale canonicalization (307 redirects)
8. Pass-through with request-scoped context and security headers

Rate limiting runs before authentication, and authentication before locale
canonicalization, so a sign-in redirect is never masked by a locale redirect.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional
from urllib.parse import urlencode

from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from structlog import get_logger

from src.core.config.settings import Settings
from src.core.exceptions import (
    AuthenticationError,
    PermissionError,
    RateLimitExceededError,
    SessionResolutionError,
)
from src.core.handlers import error_response
from src.domain.entities.identity import Identity
from src.domain.interfaces.session import ISessionResolver
from src.domain.rate_limiting.repositories import RateLimitStore
from src.domain.rate_limiting.value_objects import RateLimitKey
from src.utils.i18n import get_translated_message

from .client import get_client_identifier
from .headers import apply_context_headers, apply_security_headers
from .locale import (
    LocaleConfig,
    locale_from_path,
    localize_path,
    resolve_locale,
    set_locale_cookie,
    strip_locale,
    strip_raw_locale,
)
from .routes import RouteClass, RouteTable, matches_prefix

logger = get_logger(__name__)

CallNext = Callable[[Request], Awaitable[Response]]

REASON_ACCOUNT_SUSPENDED = "AccountSuspended"
REASON_ACCESS_DENIED = "AccessDenied"


@dataclass
class GateContext:
    """Per-request state built while the gate evaluates one request."""

    locale: str
    locale_from_path: Optional[str] = None
    identity: Optional[Identity] = None
    identity_resolved: bool = False


class RequestGate:
    """HTTP middleware callable implementing the request gate.

    Register with ``app.middleware("http")(gate)``. All collaborators are
    injected, so tests and deployments choose the counter store and the
    session mechanism.
    """

    def __init__(
        self,
        settings: Settings,
        route_table: RouteTable,
        store: RateLimitStore,
        session_resolver: ISessionResolver,
    ):
        self.settings = settings
        self.route_table = route_table
        self.store = store
        self.session_resolver = session_resolver
        self.locale_config = LocaleConfig(
            supported=tuple(settings.SUPPORTED_LOCALES),
            default=settings.DEFAULT_LOCALE,
            cookie_name=settings.LOCALE_COOKIE_NAME,
            cookie_max_age=settings.LOCALE_COOKIE_MAX_AGE_SECONDS,
            secure_cookie=settings.is_production,
        )

    async def __call__(self, request: Request, call_next: CallNext) -> Response:
        path = request.url.path
        if self.route_table.is_bypassed(path):
            return await call_next(request)

        request.state.client_id = get_client_identifier(request)
        if self.route_table.is_api(path):
            return await self._handle_api(request, call_next)
        return await self._handle_page(request, call_next)

    # ------------------------------------------------------------------
    # API requests
    # ------------------------------------------------------------------

    async def _handle_api(self, request: Request, call_next: CallNext) -> Response:
        path = request.url.path
        context = GateContext(locale=resolve_locale(request, self.locale_config))
        rate_limit_headers: Dict[str, str] = {}

        if self.settings.RATE_LIMIT_ENABLED:
            match = self.route_table.rate_limit_for(path)
            if match is not None:
                prefix, rule = match
                result = await self.store.hit(RateLimitKey(request.state.client_id, prefix), rule)
                rate_limit_headers = result.to_http_headers()
                if result.is_blocked:
                    logger.warning(
                        "rate_limit_exceeded",
                        client_id=request.state.client_id,
                        prefix=prefix,
                        retry_after=result.retry_after,
                    )
                    exc = RateLimitExceededError(
                        result.retry_after,
                        message=get_translated_message("rate_limit_exceeded", context.locale),
                    )
                    return self._finish(error_response(exc), context, rate_limit_headers)

        if self.route_table.classify_api(path) == RouteClass.PROTECTED_API:
            try:
                identity = await self._resolve_identity(request, context, surface="api")
            except SessionResolutionError as exc:
                return self._finish(error_response(exc), context, rate_limit_headers)

            denial = self._authorize_api(path, identity, context.locale)
            if denial is not None:
                return self._finish(error_response(denial), context, rate_limit_headers)

        request.state.locale = context.locale
        request.state.identity = context.identity
        response = await call_next(request)
        return self._finish(response, context, rate_limit_headers)

    def _authorize_api(self, path: str, identity: Optional[Identity], locale: str):
        if identity is None:
            logger.warning("api_unauthenticated", path=path)
            return AuthenticationError(get_translated_message("authentication_required", locale))
        if identity.is_suspended(self.settings.SUSPENDED_STATUSES):
            logger.warning("api_forbidden", path=path, user_id=identity.id, reason="suspended")
            return PermissionError(get_translated_message("account_suspended", locale))
        if self.route_table.requires_admin_api(path) and not identity.is_admin(self.settings.ADMIN_ROLES):
            logger.warning("api_forbidden", path=path, user_id=identity.id, role=identity.role)
            return PermissionError(get_translated_message("admin_privileges_required", locale))
        return None

    # ------------------------------------------------------------------
    # Page requests
    # ------------------------------------------------------------------

    async def _handle_page(self, request: Request, call_next: CallNext) -> Response:
        config = self.locale_config
        path = request.url.path
        path_locale = locale_from_path(path, config)
        context = GateContext(
            locale=resolve_locale(request, config, path_locale),
            locale_from_path=path_locale,
        )
        bare_path = strip_locale(path, config)

        try:
            identity = await self._resolve_identity(request, context, surface="page")
        except SessionResolutionError:
            identity = None

        route_class = self.route_table.classify_page(bare_path)
        if route_class in (RouteClass.PROTECTED, RouteClass.ADMIN):
            if identity is None:
                target = localize_path(self.settings.SIGN_IN_PATH, context.locale, config)
                query = urlencode({"callbackUrl": str(request.url)})
                logger.info("page_sign_in_required", path=path)
                return self._redirect(f"{target}?{query}", context)
            if identity.is_suspended(self.settings.SUSPENDED_STATUSES):
                logger.warning("page_access_denied", path=path, user_id=identity.id, reason="suspended")
                return self._redirect(self._error_url(REASON_ACCOUNT_SUSPENDED, context.locale), context)
            if route_class == RouteClass.ADMIN and not identity.is_admin(self.settings.ADMIN_ROLES):
                logger.warning("page_access_denied", path=path, user_id=identity.id, role=identity.role)
                return self._redirect(self._error_url(REASON_ACCESS_DENIED, context.locale), context)

        if identity is not None and (
            matches_prefix(bare_path, self.settings.SIGN_IN_PATH)
            or matches_prefix(bare_path, self.settings.SIGN_UP_PATH)
        ):
            target = localize_path(self.settings.AUTHENTICATED_LANDING_PATH, context.locale, config)
            return self._redirect(target, context)

        if path_locale is None and context.locale != config.default:
            return self._redirect(
                self._with_query(localize_path(path, context.locale, config), request), context
            )
        if path_locale == config.default:
            return self._redirect(self._with_query(bare_path, request), context)

        if path_locale is not None:
            # Downstream routes are locale-agnostic.
            request.scope["path"] = bare_path
            request.scope["raw_path"] = strip_raw_locale(
                request.scope.get("raw_path"), path_locale, bare_path
            )

        request.state.locale = context.locale
        request.state.identity = identity
        response = await call_next(request)
        return self._finish(response, context)

    def _error_url(self, reason: str, locale: str) -> str:
        target = localize_path(self.settings.AUTH_ERROR_PATH, locale, self.locale_config)
        return f"{target}?{urlencode({'error': reason})}"

    @staticmethod
    def _with_query(path: str, request: Request) -> str:
        query = request.url.query
        return f"{path}?{query}" if query else path

    def _redirect(self, url: str, context: GateContext) -> Response:
        return self._finish(RedirectResponse(url, status_code=307), context)

    # ------------------------------------------------------------------
    # Shared
    # ------------------------------------------------------------------

    async def _resolve_identity(
        self, request: Request, context: GateContext, surface: str
    ) -> Optional[Identity]:
        """Invoke the session resolver at most once per request, bounded by a timeout.

        Raises:
            SessionResolutionError: If the resolver raised or timed out.
        """
        if context.identity_resolved:
            return context.identity
        context.identity_resolved = True

        timeout = self.settings.SESSION_RESOLVE_TIMEOUT_SECONDS
        try:
            context.identity = await asyncio.wait_for(self.session_resolver.resolve(request), timeout)
        except asyncio.TimeoutError:
            logger.error(
                "session_resolution_timeout", surface=surface, path=request.url.path, timeout=timeout
            )
            raise SessionResolutionError(
                get_translated_message("authentication_service_error", context.locale)
            )
        except Exception as exc:
            logger.error(
                "session_resolution_failed",
                surface=surface,
                path=request.url.path,
                error=str(exc),
                exc_info=True,
            )
            raise SessionResolutionError(
                get_translated_message("authentication_service_error", context.locale)
            ) from exc
        return context.identity

    def _finish(
        self,
        response: Response,
        context: GateContext,
        extra_headers: Optional[Dict[str, str]] = None,
    ) -> Response:
        for name, value in (extra_headers or {}).items():
            response.headers[name] = value
        apply_security_headers(response, production=self.settings.is_production)
        apply_context_headers(response, context.locale, context.identity)
        if context.locale_from_path is not None:
            set_locale_cookie(response, context.locale_from_path, self.locale_config)
        return response
