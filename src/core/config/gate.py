"""
Request gate settings: locales, route classification and rate-limit rules.
"""
import logging
import re
from typing import Dict, List, Union

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings

from src.domain.rate_limiting.value_objects import RateLimitRule

logger = logging.getLogger(__name__)

_LOCALE_PATTERN = re.compile(r"^[a-z]{2}$")

PathList = Union[str, List[str]]


class GateSettings(BaseSettings):
    """
    Defines the static, process-wide tables the request gate evaluates on every request.

    Path lists accept either a JSON list or a comma-separated string, e.g.
    ``PROTECTED_PATHS=/dashboard,/profile``. ``RATE_LIMIT_RULES`` is a JSON object
    mapping a path prefix to a ``count/period`` string such as ``"60/minute"`` or
    ``"20/15minute"``.

    Security Note:
        - Route classification is a security boundary (OWASP A01:2021 - Broken
          Access Control). Anything not listed as protected or admin is public.
    """

    SUPPORTED_LOCALES: PathList = Field(default=["en", "id"])
    DEFAULT_LOCALE: str = "en"
    LOCALE_COOKIE_NAME: str = "locale"
    LOCALE_COOKIE_MAX_AGE_SECONDS: int = 60 * 60 * 24 * 365

    API_PREFIX: str = "/api"

    BYPASS_PATHS: PathList = Field(
        default=[
            "/_next",
            "/_vercel",
            "/static",
            "/api/auth/callback",
            "/favicon.ico",
            "/robots.txt",
            "/sitemap.xml",
        ]
    )
    PUBLIC_PATHS: PathList = Field(
        default=["/", "/search", "/listings", "/categories", "/users", "/auth", "/terms", "/privacy"]
    )
    PROTECTED_PATHS: PathList = Field(
        default=[
            "/dashboard",
            "/profile",
            "/settings",
            "/messages",
            "/favorites",
            "/notifications",
            "/payments",
            "/create-listing",
            "/listings/my",
        ]
    )
    ADMIN_PATHS: PathList = Field(default=["/admin"])
    PROTECTED_API_PATHS: PathList = Field(
        default=[
            "/api/users/profile",
            "/api/messages",
            "/api/notifications",
            "/api/listings/favorites",
            "/api/auth/change-password",
            "/api/auth/logout",
            "/api/admin",
        ]
    )
    ADMIN_API_PATHS: PathList = Field(default=["/api/admin"])

    RATE_LIMIT_RULES: Dict[str, str] = Field(
        default={
            "/api": "60/minute",
            "/api/auth": "30/15minute",
            "/api/auth/register": "5/hour",
            "/api/auth/forgot-password": "5/hour",
            "/api/messages": "10/minute",
            "/api/admin": "120/minute",
        }
    )

    SIGN_IN_PATH: str = "/auth/signin"
    SIGN_UP_PATH: str = "/auth/signup"
    AUTH_ERROR_PATH: str = "/auth/error"
    AUTHENTICATED_LANDING_PATH: str = "/"

    ADMIN_ROLES: PathList = Field(default=["admin"])
    SUSPENDED_STATUSES: PathList = Field(default=["suspended", "banned"])

    @field_validator(
        "SUPPORTED_LOCALES",
        "BYPASS_PATHS",
        "PUBLIC_PATHS",
        "PROTECTED_PATHS",
        "ADMIN_PATHS",
        "PROTECTED_API_PATHS",
        "ADMIN_API_PATHS",
        "ADMIN_ROLES",
        "SUSPENDED_STATUSES",
        mode="before",
    )
    @classmethod
    def split_comma_separated(cls, v: PathList) -> List[str]:
        """Splits comma-separated strings into lists of stripped entries."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("SUPPORTED_LOCALES")
    @classmethod
    def validate_locales(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("SUPPORTED_LOCALES must list at least one locale.")
        for locale in value:
            if not _LOCALE_PATTERN.match(locale):
                raise ValueError(f"Invalid locale code: {locale!r}. Use two lowercase letters.")
        return value

    @field_validator(
        "BYPASS_PATHS",
        "PUBLIC_PATHS",
        "PROTECTED_PATHS",
        "ADMIN_PATHS",
        "PROTECTED_API_PATHS",
        "ADMIN_API_PATHS",
    )
    @classmethod
    def validate_path_prefixes(cls, value: List[str]) -> List[str]:
        for prefix in value:
            if not prefix.startswith("/"):
                raise ValueError(f"Path prefix must start with '/': {prefix!r}")
        return value

    @field_validator("API_PREFIX", "SIGN_IN_PATH", "SIGN_UP_PATH", "AUTH_ERROR_PATH", "AUTHENTICATED_LANDING_PATH")
    @classmethod
    def validate_single_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError(f"Path must start with '/': {value!r}")
        return value

    @field_validator("RATE_LIMIT_RULES")
    @classmethod
    def validate_rate_limit_rules(cls, value: Dict[str, str]) -> Dict[str, str]:
        """
        Validates every rule string by parsing it once at load time.

        Raises:
            ValueError: If a prefix or rule string is malformed.
        """
        for prefix, rule in value.items():
            if not prefix.startswith("/"):
                raise ValueError(f"Rate limit prefix must start with '/': {prefix!r}")
            try:
                RateLimitRule.parse(rule)
            except ValueError as e:
                logger.error(f"Invalid rate limit rule for {prefix}: {rule}. Error: {e!s}")
                raise
        return value

    @model_validator(mode="after")
    def validate_default_locale(self) -> "GateSettings":
        if self.DEFAULT_LOCALE not in self.SUPPORTED_LOCALES:
            raise ValueError(
                f"DEFAULT_LOCALE {self.DEFAULT_LOCALE!r} is not in SUPPORTED_LOCALES {self.SUPPORTED_LOCALES}."
            )
        return self
