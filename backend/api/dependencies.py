"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together the module
implementations the API needs. Routes depend on interfaces; this file
creates the concrete implementations.

One container lives on each application (``app.state.container``) so
that separately created apps, such as those built by tests, never share
services.
"""

import asyncio
from typing import TYPE_CHECKING, Optional

from fastapi import Request

from shared.config import Settings

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.auth.interfaces import IAuthService, ITokenVerifier


class ServiceContainer:
    """
    Container for all service instances.

    Services are created lazily on first access and cached. Use reset()
    to clear cached services for testing.

    Args:
        settings: Application settings
        token_verifier: Verifier built at startup, None when unconfigured
    """

    def __init__(self, settings: Settings, token_verifier: "Optional[ITokenVerifier]" = None) -> None:
        self._settings = settings
        self._token_verifier = token_verifier
        self._auth_service: "IAuthService | None" = None
        self._lock = asyncio.Lock()

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def token_verifier(self) -> "Optional[ITokenVerifier]":
        return self._token_verifier

    async def auth(self) -> "IAuthService":
        """
        Get the server-side auth service.

        Backed by the verifier's service-role client, so profile reads and
        writes are scoped by the route to the authenticated user's id.

        Raises:
            AuthUnavailableError: No verifier configured
        """
        if self._auth_service is None:
            async with self._lock:
                if self._auth_service is None:
                    from modules.auth.exceptions import AuthUnavailableError
                    from modules.auth.gateway import IdentityGateway
                    from modules.auth.rate_limiter import SlidingWindowRateLimiter
                    from modules.auth.repository import AuthRepository
                    from modules.auth.service import AuthService

                    if self._token_verifier is None:
                        raise AuthUnavailableError()
                    client = await self._token_verifier.get_client()
                    self._auth_service = AuthService(
                        AuthRepository(
                            IdentityGateway(client),
                            fallback_origin=self._settings.frontend_url,
                        ),
                        rate_limiter=SlidingWindowRateLimiter(),
                        login_max_attempts=self._settings.login_max_attempts,
                        login_window_ms=self._settings.login_window_seconds * 1000,
                        refresh_threshold_seconds=self._settings.token_refresh_threshold_seconds,
                    )
        return self._auth_service

    def set_auth_service(self, service: "IAuthService") -> None:
        """Install a pre-built auth service. Used by tests."""
        self._auth_service = service

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._auth_service = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_container(request: Request) -> ServiceContainer:
    """FastAPI dependency for the application's service container."""
    return request.app.state.container


async def get_auth_service(request: Request) -> "IAuthService":
    """FastAPI dependency for auth service."""
    return await get_container(request).auth()
