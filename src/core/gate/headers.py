"""Response headers applied by the request gate."""

from typing import Any, Optional
from urllib.parse import quote

from starlette.responses import Response

from src.domain.entities.identity import Identity

CONTENT_SECURITY_POLICY = "; ".join(
    [
        "default-src 'self'",
        "script-src 'self' 'unsafe-inline' 'unsafe-eval' https://www.google.com "
        "https://www.gstatic.com https://maps.googleapis.com https://js.stripe.com",
        "style-src 'self' 'unsafe-inline' https://fonts.googleapis.com",
        "font-src 'self' https://fonts.gstatic.com",
        "img-src 'self' data: https: blob:",
        "connect-src 'self' https://api.stripe.com https://maps.googleapis.com https://uploads.stripe.com",
        "frame-src 'self' https://www.google.com https://js.stripe.com",
        "object-src 'none'",
        "base-uri 'self'",
        "form-action 'self'",
        "upgrade-insecure-requests",
    ]
)

PERMISSIONS_POLICY = "camera=(), microphone=(), geolocation=(self), payment=(self), usb=()"

SECURITY_HEADERS = {
    "x-frame-options": "DENY",
    "x-content-type-options": "nosniff",
    "referrer-policy": "strict-origin-when-cross-origin",
    "x-xss-protection": "1; mode=block",
    "permissions-policy": PERMISSIONS_POLICY,
    "content-security-policy": CONTENT_SECURITY_POLICY,
}

HSTS_VALUE = "max-age=31536000; includeSubDomains"


def apply_security_headers(response: Response, production: bool = False) -> Response:
    """Set the standard security headers and strip ``x-powered-by``."""
    if "x-powered-by" in response.headers:
        del response.headers["x-powered-by"]
    for name, value in SECURITY_HEADERS.items():
        response.headers[name] = value
    if production:
        response.headers["strict-transport-security"] = HSTS_VALUE
    return response


def header_value(value: Any) -> str:
    """Percent-encode an identity value so it is always a valid header value."""
    return quote(str(value), safe="")


def apply_context_headers(response: Response, locale: str, identity: Optional[Identity]) -> Response:
    """Expose the resolved locale and, when signed in, the identity summary."""
    response.headers["x-locale"] = header_value(locale)
    if identity is not None:
        response.headers["x-user-id"] = header_value(identity.id)
        response.headers["x-user-role"] = header_value(identity.role)
        if identity.locale:
            response.headers["x-user-locale"] = header_value(identity.locale)
    return response
