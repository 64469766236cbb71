"""
Authentication module interfaces.

The API layer and client shells depend on these protocols, not on the
concrete implementations. This enables testing with mocks.
"""

from typing import Callable, Optional, Protocol, runtime_checkable

from supabase import AsyncClient

from .models import (
    AuthPayload,
    AuthResult,
    AuthSession,
    AuthState,
    AuthUser,
    ProfileUpdate,
    SignInCredentials,
    SignUpCredentials,
    TokenVerification,
    UserProfile,
)


@runtime_checkable
class IAuthService(Protocol):
    """
    Interface for client-side auth operations.

    None of these methods raise for expected failures. Validation errors,
    throttling and provider errors are all reported through
    ``AuthResult.error``.
    """

    async def sign_up(self, credentials: SignUpCredentials) -> AuthResult[AuthPayload]:
        """
        Validate, sanitize and register a new user.

        Args:
            credentials: Registration form input

        Returns:
            AuthResult with the new user (and a session when email
            confirmation is disabled)
        """
        ...

    async def sign_in(self, credentials: SignInCredentials) -> AuthResult[AuthPayload]:
        """
        Sign in with email and password, subject to per-email throttling.
        """
        ...

    async def sign_out(self) -> AuthResult[None]:
        ...

    async def get_session(self) -> AuthResult[Optional[AuthSession]]:
        """
        Get the current session, refreshed first if close to expiry.
        """
        ...

    async def get_access_token(self) -> Optional[str]:
        """
        Bearer token of the current session, cached for its lifetime.
        """
        ...

    async def get_user(self) -> AuthResult[Optional[AuthUser]]:
        ...

    async def reset_password(self, email: str, captcha_token: Optional[str] = None) -> AuthResult[None]:
        """
        Send a password reset link to ``email``.
        """
        ...

    async def update_password(
        self,
        new_password: str,
        confirm_password: Optional[str] = None,
    ) -> AuthResult[Optional[AuthUser]]:
        ...

    async def get_user_profile(self, user_id: str) -> AuthResult[UserProfile]:
        ...

    async def update_profile(self, user_id: str, update: ProfileUpdate) -> AuthResult[UserProfile]:
        """
        Validate and apply a partial profile update.

        Args:
            user_id: Owner of the profile
            update: Fields to change; unset fields are left untouched

        Returns:
            AuthResult with the updated profile
        """
        ...

    def on_auth_state_change(self, listener: Callable[[AuthState], None]) -> Callable[[], None]:
        """
        Subscribe to auth state changes.

        Returns:
            Disposer that removes the listener
        """
        ...


@runtime_checkable
class ITokenVerifier(Protocol):
    """Interface for server-side bearer token verification."""

    async def get_client(self) -> AsyncClient:
        """
        Service-role client used for verification.

        Shared with server-side profile access so one client serves both.
        """
        ...

    def extract_token(self, authorization: Optional[str]) -> Optional[str]:
        """
        Extract the token from an ``Authorization`` header value.

        Returns:
            The token for exactly ``Bearer <token>``, None otherwise
        """
        ...

    async def verify(self, token: str) -> TokenVerification:
        """
        Ask the identity provider whether ``token`` is valid.

        Never raises; provider failures yield ``valid=False``.
        """
        ...


@runtime_checkable
class IRateLimiter(Protocol):
    """
    Interface for keyed attempt budgets.

    The in-memory limiter satisfies it. Deployments with several workers
    pass an implementation backed by a shared store to ``create_app``.
    """

    def is_allowed(self, key: str, max_attempts: int, window_ms: float) -> bool:
        """Record an attempt for ``key`` if the window has room."""
        ...

    def retry_after(self, key: str, max_attempts: int, window_ms: float) -> int:
        """Whole seconds until ``key`` gets a free slot, 0 if it has one now."""
        ...

    def reset(self, key: str) -> None:
        ...
