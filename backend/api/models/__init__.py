"""API models package."""

from .auth import VerifyTokenResponse
from .errors import ErrorResponse, ValidationErrorDetail, ValidationErrorResponse

__all__ = [
    "VerifyTokenResponse",
    "ErrorResponse",
    "ValidationErrorDetail",
    "ValidationErrorResponse",
]
