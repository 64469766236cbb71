"""
Error response models.

Standardized error responses for the API, used in route ``responses``
declarations so the OpenAPI schema documents them.
"""

from pydantic import BaseModel
from typing import Optional


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: str
    code: Optional[str] = None


class ValidationErrorDetail(BaseModel):
    field: str
    message: str


class ValidationErrorResponse(BaseModel):
    """Validation error response format."""

    error: str = "Validation failed"
    code: str = "VALIDATION_ERROR"
    details: list[ValidationErrorDetail]
