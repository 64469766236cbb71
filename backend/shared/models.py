"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class AuthenticatedUser(BaseModel):
    """
    Represents an authenticated caller on the request boundary.

    Populated from the identity provider's answer for a bearer token and
    made available to route handlers via dependency injection.
    """

    id: str = Field(..., description="User ID (UUID assigned by Supabase)")
    email: str = Field(..., description="User's email address")
    email_verified: bool = Field(default=False, description="Whether email is verified")
    phone: Optional[str] = Field(None, description="Phone number on the identity")

    created_at: Optional[datetime] = Field(None, description="Account creation time")
    last_sign_in: Optional[datetime] = Field(None, description="Last sign-in time")

    role: str = Field(default="authenticated", description="Provider role claim")

    model_config = {
        "frozen": True,
        "extra": "ignore",
    }

    @staticmethod
    def fallback_email(user_id: str) -> str:
        """Placeholder email for identities registered without one."""
        return f"{user_id}@no-email.local"
