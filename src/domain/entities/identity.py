"""Authenticated identity as seen by the request gate.

The identity is decoded from the session token on each request. It carries only
what access decisions and downstream handlers need; the full user record lives
in the marketplace database, which this service never touches.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional


class Role(str, Enum):
    """Represents the role of a user within the marketplace (RBAC).

    Attributes:
        USER: A regular buyer or seller.
        MODERATOR: Can review reports and listings but is not an administrator.
        ADMIN: Confers administrative privileges, including the admin dashboard.
    """

    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"


class AccountStatus(str, Enum):
    """Lifecycle status of a marketplace account."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    BANNED = "banned"


@dataclass(frozen=True)
class Identity:
    """An authenticated caller.

    ``role`` and ``status`` are kept as plain strings so that values unknown to
    this service (a role added by the sign-in service, say) never crash the gate;
    they simply fail admin checks.

    Attributes:
        id: Stable user identifier (the session token subject).
        role: Role name, e.g. ``"admin"``.
        status: Account status name, e.g. ``"active"``.
        locale: The user's preferred UI language, if known.
        email: Email address, if present in the session.
        name: Display name, if present in the session.
    """

    id: str
    role: str = Role.USER.value
    status: str = AccountStatus.ACTIVE.value
    locale: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None

    def has_role(self, roles: Iterable[str]) -> bool:
        return self.role in set(roles)

    def is_admin(self, admin_roles: Iterable[str] = (Role.ADMIN.value,)) -> bool:
        return self.has_role(admin_roles)

    def is_suspended(
        self,
        suspended_statuses: Iterable[str] = (AccountStatus.SUSPENDED.value, AccountStatus.BANNED.value),
    ) -> bool:
        return self.status in set(suspended_statuses)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role,
            "status": self.status,
            "locale": self.locale,
            "email": self.email,
            "name": self.name,
        }
