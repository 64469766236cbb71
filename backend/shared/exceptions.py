"""
Base exception classes for the Aethea backend.

Each module should define its own exceptions that inherit from these bases.
This enables consistent error handling across the application.
"""

from typing import Optional, Any


class AetheaError(Exception):
    """
    Base exception for all Aethea errors.

    All custom exceptions should inherit from this class.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.message,
            "code": self.code,
        }


class NotFoundError(AetheaError):
    """Resource not found."""

    status_code = 404


class ValidationError(AetheaError):
    """Input validation failed."""

    status_code = 400


class AuthenticationError(AetheaError):
    """Authentication failed (invalid or missing credentials)."""

    status_code = 401


class AuthorizationError(AetheaError):
    """Authorization failed (insufficient permissions)."""

    status_code = 403


class RateLimitError(AetheaError):
    """Too many requests within the allowed window."""

    status_code = 429

    def __init__(
        self,
        message: str = "Too many requests",
        code: str = "RATE_LIMITED",
        retry_after: int = 0,
    ):
        super().__init__(message, code, {"retry_after": retry_after})
        self.retry_after = retry_after


class ServiceUnavailableError(AetheaError):
    """A required backing service is not available."""

    status_code = 503


class ConfigurationError(AetheaError):
    """The process is configured in a way it must refuse to run with."""


class ExternalServiceError(AetheaError):
    """Error communicating with an external service."""

    status_code = 502

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service
