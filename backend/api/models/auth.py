"""
Authentication response models.
"""

from pydantic import BaseModel

from shared.models import AuthenticatedUser


class VerifyTokenResponse(BaseModel):
    """Successful token verification."""

    valid: bool = True
    user: AuthenticatedUser
