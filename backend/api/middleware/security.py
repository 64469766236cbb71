"""
Response hardening and request size limits.

``security_headers`` is an HTTP middleware function that stamps every
response with browser hardening headers; ``BodySizeLimitMiddleware`` is a
raw ASGI wrapper that rejects request bodies above the configured size.
"""

import logging
from typing import Awaitable, Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "X-DNS-Prefetch-Control": "off",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
}

API_CONTENT_SECURITY_POLICY = "default-src 'none'; frame-ancestors 'none'; base-uri 'none'"
HSTS_VALUE = "max-age=15552000; includeSubDomains"


async def security_headers(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Add hardening headers; API responses are never cached."""
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)

    if request.url.path.startswith("/api"):
        response.headers.setdefault("Content-Security-Policy", API_CONTENT_SECURITY_POLICY)
    response.headers["Cache-Control"] = "no-store"

    if request.url.scheme == "https":
        response.headers.setdefault("Strict-Transport-Security", HSTS_VALUE)
    return response


class BodySizeLimitMiddleware:
    """
    Reject request bodies larger than ``max_body_bytes`` with 413.

    A declared ``Content-Length`` over the limit is refused before the
    application runs. Streamed bodies are counted as they are received
    and abort with the same status once they cross the limit.
    """

    def __init__(self, app: ASGIApp, max_body_bytes: int) -> None:
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = self._content_length(scope)
        if declared is not None and declared > self.max_body_bytes:
            logger.warning(
                "Rejected %s %s: body of %d bytes exceeds %d",
                scope.get("method"),
                scope.get("path"),
                declared,
                self.max_body_bytes,
            )
            response = JSONResponse(
                status_code=413,
                content={"error": "Payload too large", "code": "PAYLOAD_TOO_LARGE"},
            )
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    raise StarletteHTTPException(status_code=413, detail="Payload too large")
            return message

        await self.app(scope, limited_receive, send)

    @staticmethod
    def _content_length(scope: Scope) -> int | None:
        for name, value in scope.get("headers", []):
            if name == b"content-length":
                try:
                    return int(value)
                except ValueError:
                    return None
        return None
