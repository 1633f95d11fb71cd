"""Static route classification for the request gate.

Every path is classified against ordered prefix lists built once from settings.
Matching is segment-aware (``/admin`` matches ``/admin`` and ``/admin/users``
but not ``/administrator``) and the longest matching prefix wins. On an exact
tie between lists the more restrictive class wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple

from src.core.config.settings import Settings
from src.domain.rate_limiting.value_objects import RateLimitRule


class RouteClass(str, Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    ADMIN = "admin"
    PROTECTED_API = "protected-api"


# Higher wins when two lists contain the same prefix.
_RESTRICTIVENESS = {
    RouteClass.PUBLIC: 0,
    RouteClass.PROTECTED: 1,
    RouteClass.PROTECTED_API: 1,
    RouteClass.ADMIN: 2,
}


def matches_prefix(path: str, prefix: str) -> bool:
    """Segment-aware prefix test; ``/`` matches every path."""
    if prefix == "/":
        return True
    prefix = prefix.rstrip("/")
    return path == prefix or path.startswith(prefix + "/")


def longest_match(path: str, prefixes: Iterable[str]) -> Optional[str]:
    """Return the longest prefix in ``prefixes`` that matches ``path``."""
    best: Optional[str] = None
    for prefix in prefixes:
        if matches_prefix(path, prefix) and (best is None or len(prefix) > len(best)):
            best = prefix
    return best


def looks_like_file(path: str) -> bool:
    """True when any part of the path contains a dot."""
    return "." in path


@dataclass(frozen=True)
class RouteTable:
    """Immutable route classification and rate-limit table.

    Attributes:
        api_prefix: Prefix identifying API routes, e.g. ``/api``.
        bypass: Prefixes that skip the gate entirely.
        page_classes: Page prefixes mapped to their class.
        protected_api: Prefixes of API routes that require a session.
        admin_api: Prefixes of API routes that additionally require an admin role.
        rate_limits: Prefixes mapped to their fixed-window rule.
    """

    api_prefix: str
    bypass: Tuple[str, ...]
    page_classes: Tuple[Tuple[str, RouteClass], ...]
    protected_api: Tuple[str, ...]
    admin_api: Tuple[str, ...]
    rate_limits: Tuple[Tuple[str, RateLimitRule], ...]

    @classmethod
    def from_settings(cls, settings: Settings) -> RouteTable:
        page_classes = (
            [(p, RouteClass.PUBLIC) for p in settings.PUBLIC_PATHS]
            + [(p, RouteClass.PROTECTED) for p in settings.PROTECTED_PATHS]
            + [(p, RouteClass.ADMIN) for p in settings.ADMIN_PATHS]
        )
        rate_limits = [
            (prefix, RateLimitRule.parse(rule)) for prefix, rule in settings.RATE_LIMIT_RULES.items()
        ]
        return cls(
            api_prefix=settings.API_PREFIX,
            bypass=tuple(settings.BYPASS_PATHS),
            page_classes=tuple(page_classes),
            protected_api=tuple(settings.PROTECTED_API_PATHS),
            admin_api=tuple(settings.ADMIN_API_PATHS),
            rate_limits=tuple(rate_limits),
        )

    def is_bypassed(self, path: str) -> bool:
        """Framework assets, auth-provider callbacks, well-known files and any file path."""
        return looks_like_file(path) or longest_match(path, self.bypass) is not None

    def is_api(self, path: str) -> bool:
        return matches_prefix(path, self.api_prefix)

    def classify_page(self, path: str) -> RouteClass:
        """Classify a locale-stripped page path; unlisted paths are public."""
        best: Optional[Tuple[str, RouteClass]] = None
        for prefix, route_class in self.page_classes:
            if not matches_prefix(path, prefix):
                continue
            if (
                best is None
                or len(prefix) > len(best[0])
                or (len(prefix) == len(best[0]) and _RESTRICTIVENESS[route_class] > _RESTRICTIVENESS[best[1]])
            ):
                best = (prefix, route_class)
        return best[1] if best else RouteClass.PUBLIC

    def classify_api(self, path: str) -> RouteClass:
        if longest_match(path, self.protected_api) or longest_match(path, self.admin_api):
            return RouteClass.PROTECTED_API
        return RouteClass.PUBLIC

    def requires_admin_api(self, path: str) -> bool:
        return longest_match(path, self.admin_api) is not None

    def rate_limit_for(self, path: str) -> Optional[Tuple[str, RateLimitRule]]:
        """Return ``(prefix, rule)`` for the longest configured prefix matching ``path``."""
        rules: Dict[str, RateLimitRule] = dict(self.rate_limits)
        prefix = longest_match(path, rules)
        if prefix is None:
            return None
        return prefix, rules[prefix]
