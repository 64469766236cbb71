"""
Authentication service implementation.

Orchestrates the client-side auth lifecycle: validates and sanitizes input
before anything reaches the provider, throttles sign-in attempts per
email, refreshes stale sessions, and keeps subscribers informed of the
current ``AuthState``.
"""

import asyncio
import logging
from typing import Callable, Optional

from supabase_auth import AsyncSupportedStorage
from supabase_auth.types import Session

from shared.config import Settings
from shared.database import create_supabase_user_client

from .constants import AuthMessages, HEIGHT_CM_RANGE, RateLimits, TokenConfig, WEIGHT_KG_RANGE
from .errors import rate_limited_error, validation_error
from .gateway import IdentityGateway
from .interfaces import IAuthService, IRateLimiter
from .models import (
    AuthPayload,
    AuthResult,
    AuthSession,
    AuthState,
    AuthStatus,
    AuthUser,
    ProfileUpdate,
    SignInCredentials,
    SignUpCredentials,
    UserProfile,
)
from .rate_limiter import get_rate_limiter
from .repository import AuthRepository, OriginProvider, map_session
from .token_manager import clear_token_cache, get_access_token, should_refresh_token
from .validators import (
    do_passwords_match,
    is_valid_date_of_birth,
    is_valid_email,
    is_valid_gender,
    is_valid_http_url,
    is_valid_international_phone,
    is_valid_name,
    is_valid_phone,
    mask_email,
    sanitize_input,
    validate_password,
)

logger = logging.getLogger(__name__)

AuthStateListener = Callable[[AuthState], None]

INITIAL_SESSION_EVENT = "INITIAL_SESSION"
SIGNED_IN_EVENT = "SIGNED_IN"
SIGNED_OUT_EVENT = "SIGNED_OUT"
TOKEN_REFRESHED_EVENT = "TOKEN_REFRESHED"

# Free-text profile fields passed through sanitize_input before writing
_SANITIZED_PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "phone",
    "allergies",
    "chronic_conditions",
    "medical_notes",
    "emergency_contact_name",
    "emergency_contact_phone",
    "insurance_provider",
    "insurance_policy_number",
)


class AuthStateChannel:
    """
    Ordered set of auth state listeners.

    ``publish`` calls every listener synchronously, in registration order.
    A listener that raises is logged and does not stop the others.
    """

    def __init__(self) -> None:
        self._listeners: dict[int, AuthStateListener] = {}
        self._next_id = 0

    def subscribe(self, listener: AuthStateListener) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            Disposer that removes the listener. Calling it twice is harmless.
        """
        listener_id = self._next_id
        self._next_id += 1
        self._listeners[listener_id] = listener

        def unsubscribe() -> None:
            self._listeners.pop(listener_id, None)

        return unsubscribe

    def publish(self, state: AuthState) -> None:
        for listener in list(self._listeners.values()):
            try:
                listener(state)
            except Exception:
                logger.exception("Auth state listener failed")

    def __len__(self) -> int:
        return len(self._listeners)


class AuthService(IAuthService):
    """
    Implementation of the authentication service.

    The service starts in the ``authenticating`` state and stays there
    until ``initialize`` or the first provider event derives a real one.

    Args:
        repository: Data access for identity, sessions and profiles
        rate_limiter: Sign-in limiter, defaults to the process-wide one
        login_max_attempts: Sign-in attempts allowed per email and window
        login_window_ms: Sign-in window in milliseconds
        refresh_threshold_seconds: Refresh sessions this close to expiry
    """

    def __init__(
        self,
        repository: AuthRepository,
        rate_limiter: Optional[IRateLimiter] = None,
        login_max_attempts: int = RateLimits.MAX_LOGIN_ATTEMPTS,
        login_window_ms: int = RateLimits.LOGIN_WINDOW_MS,
        refresh_threshold_seconds: int = TokenConfig.REFRESH_THRESHOLD_SECONDS,
    ) -> None:
        self._repository = repository
        self._rate_limiter = rate_limiter or get_rate_limiter()
        self._login_max_attempts = login_max_attempts
        self._login_window_ms = login_window_ms
        self._refresh_threshold = refresh_threshold_seconds

        self._channel = AuthStateChannel()
        self._state = AuthState(status=AuthStatus.AUTHENTICATING)
        self._event_seq = 0
        self._detach: Optional[Callable[[], None]] = None
        self._pending: set[asyncio.Task] = set()

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def attached(self) -> bool:
        return self._detach is not None

    def _publish(self, state: AuthState) -> None:
        self._state = state
        self._channel.publish(state)

    def on_auth_state_change(self, listener: AuthStateListener) -> Callable[[], None]:
        return self._channel.subscribe(listener)

    def attach(self) -> None:
        """Start listening to the provider's auth events."""
        if self._detach is not None:
            return
        self._detach = self._repository.gateway.on_auth_state_change(self._on_provider_event)

    def detach(self) -> None:
        if self._detach is not None:
            self._detach()
            self._detach = None

    async def initialize(self) -> AuthState:
        """
        Derive the first state from the stored session and publish it.

        The event number is taken before the session is read, so a provider
        event that arrives meanwhile wins over the stored session.
        """
        seq = self._next_event()
        result = await self.get_session()
        if result.error:
            logger.warning("Restoring stored session failed: %s", result.error.message)
        await self._apply_event(seq, INITIAL_SESSION_EVENT, result.data)
        return self._state

    def _on_provider_event(self, event: str, session: Optional[Session]) -> None:
        mapped = map_session(session) if session else None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Auth event %s received outside an event loop; ignored", event)
            return
        task = loop.create_task(self.handle_auth_change(event, mapped))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _next_event(self) -> int:
        self._event_seq += 1
        return self._event_seq

    async def handle_auth_change(self, event: str, session: Optional[AuthSession]) -> None:
        """
        Re-derive the auth state for a provider event and publish it.

        Events are numbered on arrival. When a newer event arrives while
        this one is still fetching the profile, this one is dropped so an
        older state never overwrites a newer one.
        """
        await self._apply_event(self._next_event(), event, session)

    async def _apply_event(self, seq: int, event: str, session: Optional[AuthSession]) -> None:
        if event == TOKEN_REFRESHED_EVENT:
            clear_token_cache()

        user = session.user if session else None
        profile: Optional[UserProfile] = None

        if user is not None:
            result = await self._repository.get_user_profile(user.id)
            if result.error:
                logger.warning("Profile fetch for %s failed: %s", user.id, result.error.message)
            profile = result.data

        if seq != self._event_seq:
            logger.debug("Discarding stale auth event %s (#%d)", event, seq)
            return

        if user is not None:
            state = AuthState(status=AuthStatus.SIGNED_IN, user=user, session=session, profile=profile)
        else:
            state = AuthState(status=AuthStatus.SIGNED_OUT)

        logger.debug("Auth event %s -> %s", event, state.status.value)
        self._publish(state)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def sign_up(self, credentials: SignUpCredentials) -> AuthResult[AuthPayload]:
        """
        Validate, sanitize and register a new user.

        Fields are checked in a fixed order and the first failure is
        returned with a field prefix where the message alone is ambiguous.
        """
        first_name = is_valid_name(credentials.first_name)
        if not first_name.valid:
            return AuthResult(error=validation_error(f"First name: {first_name.error}"))

        last_name = is_valid_name(credentials.last_name)
        if not last_name.valid:
            return AuthResult(error=validation_error(f"Last name: {last_name.error}"))

        if not is_valid_email(credentials.email):
            return AuthResult(error=validation_error(AuthMessages.INVALID_EMAIL))

        password = validate_password(credentials.password)
        if not password.valid:
            return AuthResult(error=validation_error(password.error))

        dob = is_valid_date_of_birth(credentials.date_of_birth)
        if not dob.valid:
            return AuthResult(error=validation_error(dob.error))

        if not is_valid_gender(credentials.gender):
            return AuthResult(error=validation_error(AuthMessages.INVALID_GENDER))

        phone = is_valid_phone(credentials.country_code, credentials.phone)
        if not phone.valid:
            return AuthResult(error=validation_error(phone.error))

        sanitized = credentials.model_copy(
            update={
                "email": sanitize_input(credentials.email).lower(),
                "first_name": sanitize_input(credentials.first_name),
                "last_name": sanitize_input(credentials.last_name),
                "phone": sanitize_input(credentials.phone),
            }
        )

        result = await self._repository.sign_up(sanitized)
        if result.error:
            logger.info("Sign-up for %s failed: %s", mask_email(sanitized.email), result.error.code)
        else:
            logger.info("Sign-up for %s succeeded", mask_email(sanitized.email))
        return result

    async def sign_in(self, credentials: SignInCredentials) -> AuthResult[AuthPayload]:
        """
        Sign in with email and password.

        The per-email limiter is consulted before anything else, so a
        throttled caller never reaches the provider. A successful sign-in
        clears the caller's limiter history. The published ``authenticating``
        and ``error`` states keep the current user, session and profile, so
        a failed attempt never hides a session that is still valid.
        """
        limiter_key = f"login:{credentials.email.strip().lower()}"
        if not self._rate_limiter.is_allowed(limiter_key, self._login_max_attempts, self._login_window_ms):
            logger.warning("Sign-in throttled for %s", mask_email(credentials.email))
            return AuthResult(error=rate_limited_error())

        if not is_valid_email(credentials.email):
            return AuthResult(error=validation_error(AuthMessages.INVALID_EMAIL))

        sanitized = credentials.model_copy(
            update={"email": sanitize_input(credentials.email.lower())}
        )

        self._publish(self._state.model_copy(update={"status": AuthStatus.AUTHENTICATING, "error": None}))
        result = await self._repository.sign_in(sanitized)

        if result.error:
            self._publish(self._state.model_copy(update={"status": AuthStatus.ERROR, "error": result.error}))
            return result

        self._rate_limiter.reset(limiter_key)
        if not self.attached and result.data.session is not None:
            await self.handle_auth_change(SIGNED_IN_EVENT, result.data.session)
        return result

    async def sign_out(self) -> AuthResult[None]:
        clear_token_cache()
        result = await self._repository.sign_out()
        if not result.error and not self.attached:
            await self.handle_auth_change(SIGNED_OUT_EVENT, None)
        return result

    async def get_session(self) -> AuthResult[Optional[AuthSession]]:
        """Return the current session, refreshing it first when it is near expiry."""
        result = await self._repository.get_session()
        if result.data is not None and should_refresh_token(result.data, threshold=self._refresh_threshold):
            logger.debug("Session near expiry, refreshing")
            clear_token_cache()
            return await self._repository.refresh_session()
        return result

    async def get_access_token(self) -> Optional[str]:
        """Bearer token for calls to the Aethea API, None when signed out."""
        result = await self.get_session()
        if result.data is None:
            clear_token_cache()
            return None
        return get_access_token(result.data)

    async def get_user(self) -> AuthResult[Optional[AuthUser]]:
        return await self._repository.get_user()

    async def reset_password(self, email: str, captcha_token: Optional[str] = None) -> AuthResult[None]:
        if not is_valid_email(email):
            return AuthResult(error=validation_error(AuthMessages.INVALID_EMAIL))
        return await self._repository.reset_password(
            sanitize_input(email.lower()),
            captcha_token=captcha_token,
        )

    async def update_password(
        self,
        new_password: str,
        confirm_password: Optional[str] = None,
    ) -> AuthResult[Optional[AuthUser]]:
        password = validate_password(new_password)
        if not password.valid:
            return AuthResult(error=validation_error(password.error))

        if confirm_password is not None and not do_passwords_match(new_password, confirm_password):
            return AuthResult(error=validation_error(AuthMessages.PASSWORDS_MISMATCH))

        return await self._repository.update_password(new_password)

    async def get_user_profile(self, user_id: str) -> AuthResult[UserProfile]:
        return await self._repository.get_user_profile(user_id)

    async def update_profile(self, user_id: str, update: ProfileUpdate) -> AuthResult[UserProfile]:
        """
        Validate and apply a partial profile update.

        Only fields present on ``update`` are checked and written.
        """
        error = validate_profile_update(update)
        if error is not None:
            return AuthResult(error=validation_error(error))

        sanitized = {
            field: sanitize_input(getattr(update, field))
            for field in _SANITIZED_PROFILE_FIELDS
            if getattr(update, field) is not None
        }
        return await self._repository.update_profile(user_id, update.model_copy(update=sanitized))

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def is_authenticated(self) -> bool:
        result = await self.get_session()
        return result.data is not None

    async def get_current_user(self) -> Optional[AuthUser]:
        result = await self.get_user()
        return result.data


def validate_profile_update(update: ProfileUpdate) -> Optional[str]:
    """
    Return the first validation message for a partial update, or None.

    Names are required columns: sending one as null is rejected like an
    empty string.
    """
    if "first_name" in update.model_fields_set:
        check = is_valid_name(update.first_name)
        if not check.valid:
            return f"First name: {check.error}"

    if "last_name" in update.model_fields_set:
        check = is_valid_name(update.last_name)
        if not check.valid:
            return f"Last name: {check.error}"

    if update.date_of_birth is not None:
        check = is_valid_date_of_birth(update.date_of_birth)
        if not check.valid:
            return check.error

    if update.gender is not None and not is_valid_gender(update.gender):
        return AuthMessages.INVALID_GENDER

    if update.phone is not None and not is_valid_international_phone(update.phone):
        return AuthMessages.INVALID_PHONE

    if update.emergency_contact_phone is not None and not is_valid_international_phone(
        update.emergency_contact_phone
    ):
        return f"Emergency contact: {AuthMessages.INVALID_PHONE}"

    if update.height_cm is not None:
        low, high = HEIGHT_CM_RANGE
        if not low <= update.height_cm <= high:
            return AuthMessages.HEIGHT_OUT_OF_RANGE

    if update.weight_kg is not None:
        low, high = WEIGHT_KG_RANGE
        if not low <= update.weight_kg <= high:
            return AuthMessages.WEIGHT_OUT_OF_RANGE

    if update.avatar_url is not None and not is_valid_http_url(update.avatar_url):
        return "Avatar URL must start with http:// or https://"

    return None


async def create_auth_service(
    settings: Settings,
    storage: Optional[AsyncSupportedStorage] = None,
    origin_provider: Optional[OriginProvider] = None,
) -> AuthService:
    """
    Build a ready-to-use AuthService on a fresh user client.

    The service is attached to the provider's auth events and its first
    state is derived from the stored session before it is returned.
    """
    client = await create_supabase_user_client(storage, settings)
    repository = AuthRepository(
        IdentityGateway(client),
        fallback_origin=settings.frontend_url,
        origin_provider=origin_provider,
    )
    service = AuthService(
        repository,
        login_max_attempts=settings.login_max_attempts,
        login_window_ms=settings.login_window_seconds * 1000,
        refresh_threshold_seconds=settings.token_refresh_threshold_seconds,
    )
    service.attach()
    await service.initialize()
    return service
