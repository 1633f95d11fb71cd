"""Export the identity entities seen by the request gate."""

from .identity import AccountStatus, Identity, Role

__all__ = ["Identity", "Role", "AccountStatus"]
