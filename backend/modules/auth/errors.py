"""
Auth error translation.

Provider failures arrive in several shapes: structured ``AuthApiError``
instances carrying a machine code, bare ``AuthError`` messages, postgrest
``APIError`` payloads and transport exceptions from httpx. Everything is
funnelled through ``translate_auth_error`` so callers only ever see an
``AuthError`` with a stable ``AuthErrorCode`` and a user-facing message.
"""

import logging
from enum import Enum
from typing import Any, Optional

import httpx
from pydantic import BaseModel, Field

from .constants import AuthMessages

logger = logging.getLogger(__name__)


class AuthErrorCode(str, Enum):
    """Stable error codes surfaced to callers."""

    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    EMAIL_EXISTS = "EMAIL_EXISTS"
    WEAK_PASSWORD = "WEAK_PASSWORD"
    NETWORK_ERROR = "NETWORK_ERROR"
    CAPTCHA_FAILED = "CAPTCHA_FAILED"
    RATE_LIMITED = "RATE_LIMITED"
    EMAIL_NOT_CONFIRMED = "EMAIL_NOT_CONFIRMED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    UNKNOWN = "UNKNOWN"


class AuthError(BaseModel):
    """A translated, user-facing auth failure."""

    message: str = Field(..., description="User-facing message")
    code: Optional[str] = Field(None, description="Stable error code")
    status: Optional[int] = Field(None, description="Provider HTTP status, if any")

    model_config = {"frozen": True}


# Provider error codes (supabase_auth ErrorCode literals) to our catalogue
PROVIDER_ERROR_MAP: dict[str, tuple[AuthErrorCode, str]] = {
    "invalid_credentials": (AuthErrorCode.INVALID_CREDENTIALS, AuthMessages.INVALID_CREDENTIALS),
    "user_not_found": (AuthErrorCode.USER_NOT_FOUND, AuthMessages.USER_NOT_FOUND),
    "email_exists": (AuthErrorCode.EMAIL_EXISTS, AuthMessages.EMAIL_ALREADY_EXISTS),
    "user_already_exists": (AuthErrorCode.EMAIL_EXISTS, AuthMessages.EMAIL_ALREADY_EXISTS),
    "weak_password": (AuthErrorCode.WEAK_PASSWORD, AuthMessages.WEAK_PASSWORD),
    "email_not_confirmed": (AuthErrorCode.EMAIL_NOT_CONFIRMED, AuthMessages.EMAIL_NOT_CONFIRMED),
    "captcha_failed": (AuthErrorCode.CAPTCHA_FAILED, AuthMessages.CAPTCHA_FAILED),
    "over_request_rate_limit": (AuthErrorCode.RATE_LIMITED, AuthMessages.TOO_MANY_REQUESTS),
    "over_email_send_rate_limit": (AuthErrorCode.RATE_LIMITED, AuthMessages.TOO_MANY_REQUESTS),
    "session_not_found": (AuthErrorCode.SESSION_EXPIRED, AuthMessages.SESSION_EXPIRED),
    "session_expired": (AuthErrorCode.SESSION_EXPIRED, AuthMessages.SESSION_EXPIRED),
    "refresh_token_not_found": (AuthErrorCode.SESSION_EXPIRED, AuthMessages.SESSION_EXPIRED),
    "refresh_token_already_used": (AuthErrorCode.SESSION_EXPIRED, AuthMessages.SESSION_EXPIRED),
    "validation_failed": (AuthErrorCode.CAPTCHA_FAILED, AuthMessages.CAPTCHA_FAILED),
    "email_address_invalid": (AuthErrorCode.VALIDATION_ERROR, AuthMessages.INVALID_EMAIL),
    # Our own codes pass through unchanged
    AuthErrorCode.INVALID_CREDENTIALS.value: (AuthErrorCode.INVALID_CREDENTIALS, AuthMessages.INVALID_CREDENTIALS),
    AuthErrorCode.USER_NOT_FOUND.value: (AuthErrorCode.USER_NOT_FOUND, AuthMessages.USER_NOT_FOUND),
    AuthErrorCode.NETWORK_ERROR.value: (AuthErrorCode.NETWORK_ERROR, AuthMessages.NETWORK_ERROR),
    AuthErrorCode.SESSION_EXPIRED.value: (AuthErrorCode.SESSION_EXPIRED, AuthMessages.SESSION_EXPIRED),
}

_TRANSPORT_ERRORS = (httpx.TransportError, ConnectionError, TimeoutError)


def _field(error: Any, name: str) -> Any:
    if isinstance(error, dict):
        return error.get(name)
    return getattr(error, name, None)


def _message_of(error: Any) -> str:
    message = _field(error, "message")
    if message:
        return str(message)
    if isinstance(error, BaseException) and error.args:
        return str(error.args[0])
    return ""


def translate_auth_error(error: Any) -> AuthError:
    """
    Translate any provider failure into an ``AuthError``.

    Accepts provider exceptions, plain dicts carrying ``message``/``code``
    and ``None``. Message heuristics win over the structured code because
    the provider reuses generic codes for captcha and duplicate-account
    failures.

    Args:
        error: The raw failure

    Returns:
        AuthError with a user-facing message and stable code
    """
    if error is None:
        return AuthError(message=AuthMessages.UNKNOWN_ERROR, code=AuthErrorCode.UNKNOWN.value)

    if isinstance(error, AuthError):
        return error

    if isinstance(error, _TRANSPORT_ERRORS):
        logger.warning("Auth provider unreachable: %s", type(error).__name__)
        return AuthError(message=AuthMessages.NETWORK_ERROR, code=AuthErrorCode.NETWORK_ERROR.value)

    message = _message_of(error)
    lowered = message.lower()
    raw_code = _field(error, "code")
    code = str(raw_code) if raw_code else None
    status = _field(error, "status")
    if not isinstance(status, int):
        status = None

    if "captcha" in lowered:
        return AuthError(
            message=AuthMessages.CAPTCHA_FAILED,
            code=code or AuthErrorCode.CAPTCHA_FAILED.value,
            status=status,
        )

    if "already registered" in lowered or "already exists" in lowered or "duplicate" in lowered:
        return AuthError(
            message=AuthMessages.EMAIL_ALREADY_EXISTS,
            code=AuthErrorCode.EMAIL_EXISTS.value,
            status=status,
        )

    if "password" in lowered and "character" in lowered:
        return AuthError(
            message=AuthMessages.WEAK_PASSWORD,
            code=AuthErrorCode.WEAK_PASSWORD.value,
            status=status,
        )

    if code and code in PROVIDER_ERROR_MAP:
        mapped_code, mapped_message = PROVIDER_ERROR_MAP[code]
        return AuthError(message=mapped_message, code=mapped_code.value, status=status)

    return AuthError(
        message=message or AuthMessages.UNKNOWN_ERROR,
        code=code or AuthErrorCode.UNKNOWN.value,
        status=status,
    )


def validation_error(message: str) -> AuthError:
    """Build the error returned when local input validation fails."""
    return AuthError(message=message, code=AuthErrorCode.VALIDATION_ERROR.value)


def rate_limited_error(message: str = AuthMessages.TOO_MANY_LOGIN_ATTEMPTS) -> AuthError:
    return AuthError(message=message, code=AuthErrorCode.RATE_LIMITED.value)
