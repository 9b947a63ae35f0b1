import hmac
from urllib.parse import unquote

from flask import request

from ..errors import AuthError, ConfigurationError
from .logger import info, error


def require_api_key(server_key: str | None):
    """Check the `x-api-key` header against the shared secret.

    The client value is URL-decoded first; both sides are compared trimmed.
    """
    client_key = unquote(request.headers.get("x-api-key", "") or "")

    if not server_key:
        error("[auth] server API key is not set")
        raise ConfigurationError("Server configuration error")

    match = bool(client_key) and hmac.compare_digest(
        client_key.strip().encode(), server_key.strip().encode()
    )
    info(f"[auth] key check client_len={len(client_key)} server_len={len(server_key)} match={match}")

    if not match:
        error("[auth] invalid API key")
        raise AuthError("Forbidden: Invalid API key")
