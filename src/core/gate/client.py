"""Client identification for rate limiting.

The identifier is best effort and is never used for authentication: forwarded
headers are trivially spoofable unless a trusted proxy overwrites them.
"""

from starlette.requests import Request

UNKNOWN_CLIENT = "unknown"


def get_client_identifier(request: Request) -> str:
    """First address of ``x-forwarded-for``, else ``x-real-ip``, else ``"unknown"``."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip

    return UNKNOWN_CLIENT
