"""Locale negotiation for the request gate.

The default locale is never shown in URLs: ``/listings`` is English, ``/id/listings``
is Indonesian, and ``/en/listings`` is redirected to ``/listings``.

Resolution order for page requests: URL segment, locale cookie, Accept-Language,
default locale. API requests have no URL segment and start at the cookie.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence
from urllib.parse import quote

from babel.core import negotiate_locale
from starlette.requests import Request
from starlette.responses import Response


@dataclass(frozen=True)
class LocaleConfig:
    supported: Sequence[str]
    default: str
    cookie_name: str = "locale"
    cookie_max_age: int = 60 * 60 * 24 * 365
    secure_cookie: bool = False

    def is_supported(self, locale: Optional[str]) -> bool:
        return bool(locale) and locale in self.supported


def locale_from_path(path: str, config: LocaleConfig) -> Optional[str]:
    """Return the first path segment when it is a supported locale.

    Only a locale directly after the leading slash counts: ``//id/x`` has none.
    """
    segments = path.split("/")
    if len(segments) > 1 and config.is_supported(segments[1]):
        return segments[1]
    return None


def strip_locale(path: str, config: LocaleConfig) -> str:
    """Remove a leading locale segment: ``/id/listings`` -> ``/listings``, ``/id`` -> ``/``."""
    locale = locale_from_path(path, config)
    if locale is None:
        return path
    # A single leading slash keeps the result a path, never a protocol-relative URL.
    return "/" + path[len(locale) + 1:].lstrip("/")


def strip_raw_locale(raw_path: Optional[bytes], locale: str, bare_path: str) -> bytes:
    """Strip the locale from the undecoded request path, keeping its percent-encoding.

    Falls back to encoding ``bare_path`` when the raw bytes do not start with the
    literal locale segment.
    """
    raw_path = raw_path or b""
    prefix = f"/{locale}".encode("ascii")
    rest = raw_path[len(prefix):]
    if not raw_path.startswith(prefix) or rest[:1] not in (b"", b"/"):
        return quote(bare_path).encode("ascii")
    return b"/" + rest.lstrip(b"/")


def localize_path(path: str, locale: str, config: LocaleConfig) -> str:
    """Prefix ``path`` with ``locale`` unless it is the default locale."""
    if locale == config.default:
        return path
    if path == "/":
        return f"/{locale}"
    return f"/{locale}{path}"


def _accept_language_tags(header: str) -> List[str]:
    # Header order is honoured; quality values are ignored.
    tags = []
    for part in header.split(","):
        tag = part.split(";")[0].strip()
        if tag and tag != "*":
            tags.append(tag.split("-")[0].split("_")[0].lower())
    return tags


def locale_from_accept_language(header: Optional[str], config: LocaleConfig) -> Optional[str]:
    """Return the first Accept-Language tag matching a supported locale, if any."""
    if not header:
        return None
    for tag in _accept_language_tags(header):
        match = negotiate_locale([tag], list(config.supported), sep="-")
        if match:
            return match
    return None


def locale_from_cookie(request: Request, config: LocaleConfig) -> Optional[str]:
    """The locale store: the locale cookie, when it names a supported locale."""
    value = request.cookies.get(config.cookie_name)
    return value if config.is_supported(value) else None


def resolve_locale(request: Request, config: LocaleConfig, path_locale: Optional[str] = None) -> str:
    """Resolve the effective locale: URL segment, cookie, Accept-Language, default."""
    if path_locale:
        return path_locale
    return (
        locale_from_cookie(request, config)
        or locale_from_accept_language(request.headers.get("accept-language"), config)
        or config.default
    )


def set_locale_cookie(response: Response, locale: str, config: LocaleConfig) -> None:
    response.set_cookie(
        config.cookie_name,
        locale,
        max_age=config.cookie_max_age,
        path="/",
        httponly=False,
        secure=config.secure_cookie,
        samesite="lax",
    )
