"""Signed-cookie session resolver.

Decodes the HMAC-signed JWT that the sign-in flow stores in the session cookie.
Programmatic clients may send the same token as ``Authorization: Bearer``.

Claims read from the token:

- ``sub``: user id (required)
- ``role`` / ``status``: access control attributes
- ``locale`` or ``preferences.language``: preferred UI language
- ``email`` / ``name``: profile details passed on to handlers
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

from jwt import ExpiredSignatureError, PyJWTError
from jwt import decode as jwt_decode, encode as jwt_encode
from starlette.requests import Request
from structlog import get_logger

from src.core.config.settings import Settings, settings as default_settings
from src.domain.entities.identity import AccountStatus, Identity, Role
from src.domain.interfaces.session import ISessionResolver

logger = get_logger(__name__)

# Browsers only send "__Secure-" cookies over HTTPS; production deployments use it.
SECURE_COOKIE_PREFIX = "__Secure-"


class JWTSessionResolver(ISessionResolver):
    """Resolves identities from signed session tokens.

    Attributes:
        settings: Settings providing the secret, algorithm, cookie name and audience.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings

    def _extract_token(self, request: Request) -> Optional[str]:
        cookie_name = self.settings.SESSION_COOKIE_NAME
        token = request.cookies.get(SECURE_COOKIE_PREFIX + cookie_name) or request.cookies.get(
            cookie_name
        )
        if token:
            return token

        authorization = request.headers.get("authorization", "")
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
        return None

    async def resolve(self, request: Request) -> Optional[Identity]:
        token = self._extract_token(request)
        if token is None:
            return None

        try:
            payload = self.decode(token)
        except ExpiredSignatureError:
            logger.debug("session_token_expired", path=request.url.path)
            return None
        except PyJWTError as exc:
            logger.warning("session_token_invalid", path=request.url.path, error=str(exc))
            return None

        return self.identity_from_claims(payload)

    def decode(self, token: str) -> Mapping[str, Any]:
        """Verify and decode a session token.

        Raises:
            PyJWTError: If the signature, expiry or audience check fails.
        """
        audience = self.settings.SESSION_AUDIENCE
        return jwt_decode(
            token,
            self.settings.SESSION_SECRET.get_secret_value(),
            algorithms=[self.settings.SESSION_ALGORITHM],
            audience=audience,
            options={"require": ["sub", "exp"], "verify_aud": audience is not None},
        )

    @staticmethod
    def identity_from_claims(payload: Mapping[str, Any]) -> Optional[Identity]:
        """Build an :class:`Identity` from decoded claims, or ``None`` without a subject."""
        subject = payload.get("sub")
        if not subject:
            return None

        preferences = payload.get("preferences") or {}
        locale = payload.get("locale")
        if not locale and isinstance(preferences, Mapping):
            locale = preferences.get("language")

        return Identity(
            id=str(subject),
            role=str(payload.get("role") or Role.USER.value),
            status=str(payload.get("status") or AccountStatus.ACTIVE.value),
            locale=str(locale) if locale else None,
            email=payload.get("email"),
            name=payload.get("name"),
        )

    def issue(self, identity: Identity, expires_in: Optional[timedelta] = None) -> str:
        """Mint a session token for ``identity``.

        The production sign-in flow lives elsewhere; this is used by tooling and
        tests that need a token the resolver accepts.
        """
        now = datetime.now(timezone.utc)
        if expires_in is None:
            expires_in = timedelta(seconds=self.settings.SESSION_MAX_AGE_SECONDS)
        claims = {
            "sub": identity.id,
            "role": identity.role,
            "status": identity.status,
            "iat": now,
            "exp": now + expires_in,
        }
        if identity.locale:
            claims["locale"] = identity.locale
        if identity.email:
            claims["email"] = identity.email
        if identity.name:
            claims["name"] = identity.name
        if self.settings.SESSION_AUDIENCE:
            claims["aud"] = self.settings.SESSION_AUDIENCE
        return jwt_encode(
            claims,
            self.settings.SESSION_SECRET.get_secret_value(),
            algorithm=self.settings.SESSION_ALGORITHM,
        )
