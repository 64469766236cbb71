"""
Authentication module exceptions.

These exceptions are raised on the server side of the auth module and can
be caught by API error handlers to return appropriate HTTP responses.
Client-side auth operations do not raise; they return ``AuthResult``.
"""

from shared.exceptions import (
    AetheaError,
    AuthenticationError,
    NotFoundError,
    ServiceUnavailableError,
)


class InvalidTokenError(AuthenticationError):
    """Raised when the identity provider rejects a bearer token."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message, code="INVALID_TOKEN")


class MissingTokenError(AuthenticationError):
    """Raised when no usable ``Authorization: Bearer`` header is present."""

    def __init__(self, message: str = "Missing or invalid authorization header"):
        super().__init__(message, code="UNAUTHORIZED")


class AuthUnavailableError(ServiceUnavailableError):
    """Raised when token verification is not configured."""

    def __init__(self, message: str = "Authentication service not configured"):
        super().__init__(message, code="AUTH_UNAVAILABLE")


class ProfileNotFoundError(NotFoundError):
    """Raised when the authenticated user has no profile row."""

    def __init__(self, user_id: str):
        super().__init__(
            "Profile not found",
            code="PROFILE_NOT_FOUND",
            details={"user_id": user_id},
        )


class SessionStorageError(AetheaError):
    """Raised by session store adapters when stored data cannot be read."""

    def __init__(self, message: str):
        super().__init__(message, code="SESSION_STORAGE_ERROR")
