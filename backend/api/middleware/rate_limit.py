"""
Per-IP request throttling.

Two budgets share one limiter stored on the application:
a general budget for everything under ``/api`` and a stricter one for the
auth endpoints. Both are plain FastAPI dependencies.

Usage:
    router = APIRouter(dependencies=[Depends(auth_rate_limit)])
"""

import logging

from fastapi import Request

from modules.auth.interfaces import IRateLimiter
from shared.exceptions import RateLimitError

logger = logging.getLogger(__name__)

API_RATE_LIMIT_MESSAGE = "Too many requests. Please try again later."
AUTH_RATE_LIMIT_MESSAGE = "Too many authentication attempts. Please try again after 15 minutes."


def client_ip(request: Request) -> str:
    """Best-effort client address for throttling keys."""
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def _enforce(
    request: Request,
    scope: str,
    max_requests: int,
    window_seconds: int,
    code: str,
    message: str,
) -> None:
    limiter: IRateLimiter = request.app.state.rate_limiter
    key = f"{scope}:{client_ip(request)}"
    window_ms = window_seconds * 1000

    if limiter.is_allowed(key, max_requests, window_ms):
        return

    retry_after = limiter.retry_after(key, max_requests, window_ms)
    logger.warning("Rate limit %s exceeded by %s on %s", scope, client_ip(request), request.url.path)
    raise RateLimitError(message, code=code, retry_after=retry_after)


async def api_rate_limit(request: Request) -> None:
    """General budget: settings.api_rate_limit_requests per api_rate_limit_window."""
    settings = request.app.state.settings
    _enforce(
        request,
        scope="api",
        max_requests=settings.api_rate_limit_requests,
        window_seconds=settings.api_rate_limit_window,
        code="RATE_LIMITED",
        message=API_RATE_LIMIT_MESSAGE,
    )


async def auth_rate_limit(request: Request) -> None:
    """Strict budget for authentication endpoints."""
    settings = request.app.state.settings
    _enforce(
        request,
        scope="auth",
        max_requests=settings.auth_rate_limit_requests,
        window_seconds=settings.auth_rate_limit_window,
        code="AUTH_RATE_LIMITED",
        message=AUTH_RATE_LIMIT_MESSAGE,
    )
