"""
Identity gateway.

Thin wrapper over the Supabase async client. The provider SDK raises on
failure; the gateway catches every provider and transport error and
returns a ``GatewayResult`` instead, so nothing above it needs a
try/except around a provider call.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

import httpx
from postgrest import APIError as PostgrestAPIError
from supabase import AsyncClient
from supabase_auth.errors import AuthError as ProviderAuthError
from supabase_auth.types import AuthResponse, Session, User

from .constants import PROFILES_TABLE
from .errors import AuthError, translate_auth_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

AuthChangeCallback = Callable[[str, Optional[Session]], None]

_PROVIDER_ERRORS = (
    ProviderAuthError,
    PostgrestAPIError,
    httpx.HTTPError,
    ConnectionError,
    TimeoutError,
)


@dataclass(frozen=True)
class GatewayResult(Generic[T]):
    """Normalized provider answer: ``data`` on success, ``error`` otherwise."""

    data: Optional[T] = None
    error: Optional[AuthError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _failure(operation: str, exc: Exception) -> GatewayResult:
    error = translate_auth_error(exc)
    logger.warning("Provider %s failed: %s (%s)", operation, error.message, error.code)
    return GatewayResult(error=error)


class IdentityGateway:
    """
    Provider-facing operations for sessions, users and profile rows.

    Example:
        gateway = IdentityGateway(await create_supabase_user_client(storage))
        result = await gateway.sign_in_with_password("a@b.co", "Secret1!")
        if result.error:
            ...
    """

    def __init__(self, client: AsyncClient) -> None:
        self._client = client

    @property
    def client(self) -> AsyncClient:
        return self._client

    # -------------------------------------------------------------------------
    # Identity
    # -------------------------------------------------------------------------

    async def sign_up(
        self,
        email: str,
        password: str,
        metadata: Optional[dict[str, Any]] = None,
        captcha_token: Optional[str] = None,
    ) -> GatewayResult[AuthResponse]:
        options: dict[str, Any] = {"data": metadata or {}}
        if captcha_token:
            options["captcha_token"] = captcha_token
        try:
            response = await self._client.auth.sign_up(
                {"email": email, "password": password, "options": options}
            )
        except _PROVIDER_ERRORS as e:
            return _failure("sign_up", e)
        return GatewayResult(data=response)

    async def sign_in_with_password(
        self,
        email: str,
        password: str,
        captcha_token: Optional[str] = None,
    ) -> GatewayResult[AuthResponse]:
        credentials: dict[str, Any] = {"email": email, "password": password}
        if captcha_token:
            credentials["options"] = {"captcha_token": captcha_token}
        try:
            response = await self._client.auth.sign_in_with_password(credentials)
        except _PROVIDER_ERRORS as e:
            return _failure("sign_in_with_password", e)
        return GatewayResult(data=response)

    async def sign_out(self) -> GatewayResult[None]:
        try:
            await self._client.auth.sign_out()
        except _PROVIDER_ERRORS as e:
            return _failure("sign_out", e)
        return GatewayResult()

    async def get_session(self) -> GatewayResult[Optional[Session]]:
        try:
            session = await self._client.auth.get_session()
        except _PROVIDER_ERRORS as e:
            return _failure("get_session", e)
        return GatewayResult(data=session)

    async def get_user(self, token: Optional[str] = None) -> GatewayResult[Optional[User]]:
        """Resolve the user for ``token``, or for the current session when omitted."""
        try:
            response = await self._client.auth.get_user(token)
        except _PROVIDER_ERRORS as e:
            return _failure("get_user", e)
        return GatewayResult(data=response.user if response else None)

    async def refresh_session(self, refresh_token: Optional[str] = None) -> GatewayResult[AuthResponse]:
        try:
            response = await self._client.auth.refresh_session(refresh_token)
        except _PROVIDER_ERRORS as e:
            return _failure("refresh_session", e)
        return GatewayResult(data=response)

    async def reset_password_for_email(
        self,
        email: str,
        redirect_to: Optional[str] = None,
        captcha_token: Optional[str] = None,
    ) -> GatewayResult[None]:
        options: dict[str, Any] = {}
        if redirect_to:
            options["redirect_to"] = redirect_to
        if captcha_token:
            options["captcha_token"] = captcha_token
        try:
            await self._client.auth.reset_password_for_email(email, options)
        except _PROVIDER_ERRORS as e:
            return _failure("reset_password_for_email", e)
        return GatewayResult()

    async def update_user(self, attributes: dict[str, Any]) -> GatewayResult[Optional[User]]:
        try:
            response = await self._client.auth.update_user(attributes)
        except _PROVIDER_ERRORS as e:
            return _failure("update_user", e)
        return GatewayResult(data=response.user if response else None)

    def on_auth_state_change(self, callback: AuthChangeCallback) -> Callable[[], None]:
        """
        Subscribe to provider auth events.

        Returns:
            Callable that cancels the subscription
        """
        subscription = self._client.auth.on_auth_state_change(callback)
        return subscription.unsubscribe

    # -------------------------------------------------------------------------
    # Profile rows
    # -------------------------------------------------------------------------

    async def select_profile(self, user_id: str) -> GatewayResult[Optional[dict[str, Any]]]:
        try:
            response = await (
                self._client.table(PROFILES_TABLE)
                .select("*")
                .eq("id", user_id)
                .limit(1)
                .execute()
            )
        except _PROVIDER_ERRORS as e:
            return _failure("select_profile", e)
        rows = response.data or []
        return GatewayResult(data=rows[0] if rows else None)

    async def update_profile(
        self,
        user_id: str,
        values: dict[str, Any],
    ) -> GatewayResult[Optional[dict[str, Any]]]:
        try:
            response = await (
                self._client.table(PROFILES_TABLE)
                .update(values)
                .eq("id", user_id)
                .execute()
            )
        except _PROVIDER_ERRORS as e:
            return _failure("update_profile", e)
        rows = response.data or []
        return GatewayResult(data=rows[0] if rows else None)
