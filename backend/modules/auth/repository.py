"""
Auth repository.

One method per auth operation. Each delegates to the identity gateway,
maps provider objects into the module's models and answers with an
``AuthResult``. Profile rows are mapped in exactly one place
(``map_row_to_profile`` / ``map_profile_update_to_row``).
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from supabase_auth.types import Session, User

from .constants import DEFAULT_APP_URL, RESET_PASSWORD_PATH, AuthMessages
from .errors import AuthError, AuthErrorCode
from .gateway import IdentityGateway
from .models import (
    AuthPayload,
    AuthResult,
    AuthSession,
    AuthUser,
    ProfileUpdate,
    SignInCredentials,
    SignUpCredentials,
    UserProfile,
)
from .token_manager import get_token_expiry
from .validators import normalize_phone

logger = logging.getLogger(__name__)

OriginProvider = Callable[[], Optional[str]]

# Every column read from the profiles table
PROFILE_COLUMNS: tuple[str, ...] = (
    "id",
    "email",
    "first_name",
    "last_name",
    "full_name",
    "gender",
    "phone",
    "date_of_birth",
    "blood_type",
    "allergies",
    "chronic_conditions",
    "height_cm",
    "weight_kg",
    "medical_notes",
    "emergency_contact_name",
    "emergency_contact_phone",
    "insurance_provider",
    "insurance_policy_number",
    "avatar_url",
    "is_profile_complete",
    "created_at",
    "updated_at",
)

# Generated by the database or owned by the identity record
READ_ONLY_PROFILE_COLUMNS = frozenset(
    {"id", "email", "full_name", "is_profile_complete", "created_at", "updated_at"}
)

WRITABLE_PROFILE_COLUMNS: tuple[str, ...] = tuple(
    c for c in PROFILE_COLUMNS if c not in READ_ONLY_PROFILE_COLUMNS
)


def map_user(user: User) -> AuthUser:
    return AuthUser(
        id=user.id,
        email=user.email,
        phone=user.phone or None,
        email_verified=user.email_confirmed_at is not None,
        role=user.role,
        user_metadata=user.user_metadata or {},
        created_at=user.created_at,
        last_sign_in_at=user.last_sign_in_at,
    )


def map_session(session: Session) -> AuthSession:
    """Map a provider session. A missing expiry is read from the token's ``exp`` claim."""
    expires_at = session.expires_at
    if not expires_at:
        expiry_ms = get_token_expiry(session.access_token)
        expires_at = expiry_ms // 1000 if expiry_ms is not None else None
    return AuthSession(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_in=session.expires_in,
        expires_at=expires_at,
        token_type=session.token_type or "bearer",
        user=map_user(session.user) if session.user else None,
    )


def map_row_to_profile(row: dict[str, Any]) -> UserProfile:
    """Map a profiles row to a ``UserProfile``. Unknown columns are ignored."""
    values = {c: row[c] for c in PROFILE_COLUMNS if row.get(c) is not None}
    return UserProfile.model_validate(values)


def map_profile_update_to_row(update: ProfileUpdate) -> dict[str, Any]:
    """
    Map a partial update to profiles columns.

    Only fields explicitly set on ``update`` are written, plus a fresh
    ``updated_at`` timestamp.
    """
    values = update.model_dump(mode="json", exclude_unset=True)
    row = {c: values[c] for c in WRITABLE_PROFILE_COLUMNS if c in values}
    row["updated_at"] = datetime.now(timezone.utc).isoformat()
    return row


def _profile_not_found() -> AuthError:
    return AuthError(message=AuthMessages.PROFILE_NOT_FOUND, code=AuthErrorCode.USER_NOT_FOUND.value)


class AuthRepository:
    """
    Data access for identity, sessions and profiles.

    Args:
        gateway: Provider wrapper
        fallback_origin: Origin used for reset links when the origin
            provider yields nothing
        origin_provider: Returns the origin of the running client app,
            if it knows one
    """

    def __init__(
        self,
        gateway: IdentityGateway,
        fallback_origin: str = DEFAULT_APP_URL,
        origin_provider: Optional[OriginProvider] = None,
    ) -> None:
        self._gateway = gateway
        self._fallback_origin = fallback_origin
        self._origin_provider = origin_provider

    @property
    def gateway(self) -> IdentityGateway:
        return self._gateway

    def reset_redirect_url(self) -> str:
        origin = self._origin_provider() if self._origin_provider else None
        origin = (origin or self._fallback_origin or DEFAULT_APP_URL).rstrip("/")
        return f"{origin}{RESET_PASSWORD_PATH}"

    async def sign_up(self, credentials: SignUpCredentials) -> AuthResult[AuthPayload]:
        """
        Register a new identity.

        Name, gender, phone and date of birth travel as user metadata so the
        profile row can be created from them. A user with an empty identity
        list means the email is already registered.
        """
        metadata = {
            "first_name": credentials.first_name,
            "last_name": credentials.last_name,
            "full_name": f"{credentials.first_name} {credentials.last_name}",
            "gender": credentials.gender,
            "phone": normalize_phone(credentials.country_code, credentials.phone),
            "date_of_birth": credentials.date_of_birth,
        }
        result = await self._gateway.sign_up(
            credentials.email,
            credentials.password,
            metadata=metadata,
            captcha_token=credentials.captcha_token,
        )
        if result.error:
            return AuthResult(error=result.error)

        response = result.data
        user = response.user if response else None
        if user is not None and user.identities is not None and len(user.identities) == 0:
            return AuthResult(
                error=AuthError(
                    message=AuthMessages.EMAIL_ALREADY_REGISTERED_SIGN_IN,
                    code=AuthErrorCode.EMAIL_EXISTS.value,
                )
            )

        return AuthResult(
            data=AuthPayload(
                user=map_user(user) if user else None,
                session=map_session(response.session) if response and response.session else None,
            )
        )

    async def sign_in(self, credentials: SignInCredentials) -> AuthResult[AuthPayload]:
        result = await self._gateway.sign_in_with_password(
            credentials.email,
            credentials.password,
            captcha_token=credentials.captcha_token,
        )
        if result.error:
            return AuthResult(error=result.error)

        response = result.data
        return AuthResult(
            data=AuthPayload(
                user=map_user(response.user) if response.user else None,
                session=map_session(response.session) if response.session else None,
            )
        )

    async def sign_out(self) -> AuthResult[None]:
        result = await self._gateway.sign_out()
        return AuthResult(error=result.error)

    async def get_session(self) -> AuthResult[Optional[AuthSession]]:
        result = await self._gateway.get_session()
        if result.error:
            return AuthResult(error=result.error)
        return AuthResult(data=map_session(result.data) if result.data else None)

    async def get_user(self, token: Optional[str] = None) -> AuthResult[Optional[AuthUser]]:
        result = await self._gateway.get_user(token)
        if result.error:
            return AuthResult(error=result.error)
        return AuthResult(data=map_user(result.data) if result.data else None)

    async def refresh_session(self) -> AuthResult[AuthSession]:
        result = await self._gateway.refresh_session()
        if result.error:
            return AuthResult(error=result.error)
        if result.data is None or result.data.session is None:
            return AuthResult(
                error=AuthError(
                    message=AuthMessages.SESSION_EXPIRED,
                    code=AuthErrorCode.SESSION_EXPIRED.value,
                )
            )
        return AuthResult(data=map_session(result.data.session))

    async def reset_password(self, email: str, captcha_token: Optional[str] = None) -> AuthResult[None]:
        result = await self._gateway.reset_password_for_email(
            email,
            redirect_to=self.reset_redirect_url(),
            captcha_token=captcha_token,
        )
        return AuthResult(error=result.error)

    async def update_password(self, new_password: str) -> AuthResult[Optional[AuthUser]]:
        result = await self._gateway.update_user({"password": new_password})
        if result.error:
            return AuthResult(error=result.error)
        return AuthResult(data=map_user(result.data) if result.data else None)

    async def get_user_profile(self, user_id: str) -> AuthResult[UserProfile]:
        result = await self._gateway.select_profile(user_id)
        if result.error:
            return AuthResult(error=result.error)
        if result.data is None:
            return AuthResult(error=_profile_not_found())
        return AuthResult(data=map_row_to_profile(result.data))

    async def update_profile(self, user_id: str, update: ProfileUpdate) -> AuthResult[UserProfile]:
        row = map_profile_update_to_row(update)
        result = await self._gateway.update_profile(user_id, row)
        if result.error:
            return AuthResult(error=result.error)
        if result.data is None:
            return AuthResult(error=_profile_not_found())
        logger.info("Profile %s updated (%d fields)", user_id, len(row) - 1)
        return AuthResult(data=map_row_to_profile(result.data))
