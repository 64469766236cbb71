"""
Token freshness policy and access-token cache.
"""

import logging
import time
from typing import Any, Optional

import jwt

from .constants import TokenConfig
from .models import AuthSession

logger = logging.getLogger(__name__)

ACCESS_TOKEN_CACHE_KEY = "access_token"


class TokenCache:
    """In-memory key to token cache with per-entry expiry."""

    def __init__(self) -> None:
        self._entries: dict[str, tuple[str, float]] = {}

    def set(self, key: str, token: str, expires_in: float) -> None:
        """Cache ``token`` under ``key`` for ``expires_in`` seconds."""
        self._entries[key] = (token, time.time() + expires_in)

    def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        token, expires_at = entry
        if time.time() >= expires_at:
            del self._entries[key]
            return None
        return token

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def clear(self) -> None:
        self._entries.clear()


token_cache = TokenCache()


def should_refresh_token(
    session: Optional[AuthSession],
    now: Optional[float] = None,
    threshold: int = TokenConfig.REFRESH_THRESHOLD_SECONDS,
) -> bool:
    """
    Decide whether a session's access token is due for refresh.

    Args:
        session: Current session, may be None
        now: Unix seconds, defaults to the wall clock
        threshold: Seconds before expiry at which refresh kicks in

    Returns:
        False without a session or without an expiry; otherwise True when
        the token expires within ``threshold`` seconds (or already has).
    """
    if session is None or not session.expires_at:
        return False

    current = int(now if now is not None else time.time())
    return session.expires_at - current <= threshold


def get_access_token(session: Optional[AuthSession]) -> Optional[str]:
    """Return the session's access token, caching it for its lifetime."""
    if session is None:
        return None

    cached = token_cache.get(ACCESS_TOKEN_CACHE_KEY)
    if cached:
        return cached

    expires_in = session.expires_in or TokenConfig.DEFAULT_EXPIRES_IN_SECONDS
    token_cache.set(ACCESS_TOKEN_CACHE_KEY, session.access_token, expires_in)
    return session.access_token


def clear_token_cache() -> None:
    token_cache.clear()


def decode_jwt(token: str) -> Optional[dict[str, Any]]:
    """
    Decode a JWT payload without verifying it.

    For reading claims on the client only. Server-side trust decisions go
    through the identity provider, never through this function.
    """
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError as e:
        logger.debug("Failed to decode JWT: %s", e)
        return None


def get_token_expiry(token: str) -> Optional[int]:
    """Expiry of a JWT in Unix milliseconds, None if unreadable."""
    payload = decode_jwt(token)
    if not payload or not payload.get("exp"):
        return None
    return int(payload["exp"]) * 1000

