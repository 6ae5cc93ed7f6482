"""
Authentication for the administrative refresh endpoints.

The refresh routes are guarded by a single shared secret sent in the
``X-Refresh-API-Key`` header.  The expected value comes from the
application's ``Settings`` (``REFRESH_API_KEY``).  If no key is
configured the routes are unusable rather than open: every request is
rejected with 503 so that a missing secret is noticed instead of
silently exposing the refresh trigger.
"""

import hmac
import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader

API_KEY_HEADER = "X-Refresh-API-Key"

logger = logging.getLogger(__name__)

api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


def keys_match(provided: Optional[str], expected: str) -> bool:
    """Constant-time comparison of the presented key with the configured one."""
    if not provided or not expected:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def require_refresh_key(request: Request, api_key: Optional[str] = Depends(api_key_header)) -> None:
    """Dependency that admits only callers presenting the refresh API key.

    Raises
    ------
    HTTPException
        503 when ``REFRESH_API_KEY`` is not configured, 401 when the
        header is missing or does not match.
    """
    expected = request.app.state.settings.refresh_api_key
    if not expected:
        logger.error("REFRESH_API_KEY is not set; refusing administrative request")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Server configuration error: REFRESH_API_KEY not set",
        )
    if not keys_match(api_key, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
        )
