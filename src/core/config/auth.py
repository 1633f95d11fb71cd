"""Session authentication settings.
"""

import logging
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class AuthSettings(BaseSettings):
    """Defines settings for decoding the signed session token issued at sign-in.

    The session token is a JWT carried in a cookie (or a bearer header for
    programmatic clients). The request gate only ever reads it; minting happens
    in the sign-in flow, which is outside this service.

    Security Note:
        - SESSION_SECRET must be a cryptographically secure random string of at
          least 32 characters, shared only with the sign-in service
          (OWASP A02:2021 - Cryptographic Failures).
        - Never log the secret or raw session tokens.
    """

    SESSION_SECRET: SecretStr = Field(...)
    SESSION_ALGORITHM: str = "HS256"
    SESSION_COOKIE_NAME: str = "session-token"
    SESSION_AUDIENCE: Optional[str] = None
    SESSION_MAX_AGE_SECONDS: int = Field(default=30 * 24 * 60 * 60, ge=60)

    # Upper bound on a single session lookup made by the request gate
    SESSION_RESOLVE_TIMEOUT_SECONDS: float = Field(default=2.0, gt=0)

    @field_validator("SESSION_SECRET")
    @classmethod
    def validate_session_secret(cls, value: SecretStr) -> SecretStr:
        """Rejects secrets that are too short to sign session tokens safely.

        Raises:
            ValueError: If the secret is shorter than 32 characters.
        """
        if len(value.get_secret_value()) < 32:
            logger.error("SESSION_SECRET is shorter than 32 characters.")
            raise ValueError("SESSION_SECRET must be at least 32 characters long.")
        return value

    @field_validator("SESSION_ALGORITHM")
    @classmethod
    def validate_session_algorithm(cls, value: str) -> str:
        if value not in ("HS256", "HS384", "HS512"):
            raise ValueError("SESSION_ALGORITHM must be one of HS256, HS384 or HS512.")
        return value
