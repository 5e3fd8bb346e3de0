"""API key authentication for the signing service.

Validates the X-API-Key header against SERVICE_API_KEYS. Returns a
short, non-secret caller label for audit logs.
"""

import hmac

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader

from preferred_pictures.config.settings import get_settings

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def _match_key(api_key: str) -> str | None:
    match: str | None = None
    for valid_key in get_settings().api_keys_list:
        # Always iterate all keys to maintain constant-time behavior
        if hmac.compare_digest(api_key, valid_key):
            match = valid_key
    return match


async def verify_api_key(api_key: str | None = Security(api_key_header)) -> str:
    """FastAPI dependency that requires a valid service API key."""
    if api_key is None:
        raise HTTPException(status_code=401, detail="Missing API key")

    valid_key = _match_key(api_key)
    if valid_key is None:
        raise HTTPException(status_code=403, detail="Invalid API key")
    return f"key-{valid_key[:8]}"


async def optional_api_key(api_key: str | None = Security(api_key_header)) -> str:
    """Like verify_api_key, but keyless calls pass when ALLOW_ANONYMOUS_REDIRECT is set.

    Used by the redirect endpoint, which is meant for <img src> embedding
    where browsers cannot send custom headers.
    """
    if api_key is None and get_settings().allow_anonymous_redirect:
        return "anonymous"
    return await verify_api_key(api_key)
