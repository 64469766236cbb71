"""
Server-side bearer token verification.

Tokens are not checked locally: every token is resolved against the
identity provider with a service-role client, so revoked sessions are
rejected immediately.
"""

import asyncio
import logging
from typing import Optional

from supabase import AsyncClient, AsyncSupabaseException

from shared.config import Settings
from shared.database import create_supabase_service_client
from shared.models import AuthenticatedUser

from .gateway import IdentityGateway
from .interfaces import ITokenVerifier
from .models import TokenVerification

logger = logging.getLogger(__name__)

BEARER_SCHEME = "Bearer"


def to_authenticated_user(user) -> AuthenticatedUser:
    """Map a provider user to the request-boundary identity."""
    return AuthenticatedUser(
        id=user.id,
        email=user.email or AuthenticatedUser.fallback_email(user.id),
        email_verified=user.email_confirmed_at is not None,
        phone=user.phone or None,
        created_at=user.created_at,
        last_sign_in=user.last_sign_in_at,
        role=user.role or "authenticated",
    )


class TokenVerifier(ITokenVerifier):
    """
    Verifies access tokens with the identity provider.

    The service-role client is created on first use and never refreshes or
    persists a session of its own.

    Args:
        supabase_url: Project URL
        service_key: Service-role key
        client: Pre-built client, mainly for tests
    """

    def __init__(
        self,
        supabase_url: str,
        service_key: str,
        client: Optional[AsyncClient] = None,
    ) -> None:
        self._supabase_url = supabase_url
        self._service_key = service_key
        self._client = client
        self._client_lock = asyncio.Lock()

    async def get_client(self) -> AsyncClient:
        if self._client is None:
            async with self._client_lock:
                if self._client is None:
                    self._client = await create_supabase_service_client(
                        self._supabase_url, self._service_key
                    )
        return self._client

    def extract_token(self, authorization: Optional[str]) -> Optional[str]:
        if not authorization:
            return None
        parts = authorization.split(" ")
        if len(parts) != 2 or parts[0] != BEARER_SCHEME or not parts[1]:
            return None
        return parts[1]

    async def verify(self, token: str) -> TokenVerification:
        if not token:
            return TokenVerification(valid=False, error="Invalid token")

        try:
            client = await self.get_client()
        except AsyncSupabaseException as e:
            logger.error("Could not create verification client: %s", e)
            return TokenVerification(valid=False, error="Token verification failed")

        result = await IdentityGateway(client).get_user(token)
        if result.error or result.data is None:
            message = result.error.message if result.error else "Invalid token"
            return TokenVerification(valid=False, error=message)

        return TokenVerification(valid=True, user=to_authenticated_user(result.data))


def initialize_token_verifier(settings: Settings) -> Optional[TokenVerifier]:
    """
    Build the verifier from settings.

    Returns:
        TokenVerifier, or None when Supabase credentials are not configured.
        Callers decide whether a missing verifier is fatal.
    """
    if not settings.supabase_configured:
        logger.warning(
            "SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY not set; token verification disabled"
        )
        return None
    return TokenVerifier(settings.supabase_url, settings.supabase_service_role_key)
