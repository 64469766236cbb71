"""
Authentication module models.

These models define the data structures for authentication, sessions and
user profiles. Profiles serialize with camelCase aliases for the web and
mobile clients while the Python side stays snake_case.
"""

from datetime import date, datetime
from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from shared.models import AuthenticatedUser

from .errors import AuthError

T = TypeVar("T")


class Gender(str, Enum):
    """Accepted gender values at sign-up."""

    MALE = "male"
    FEMALE = "female"


class BloodType(str, Enum):
    """ABO blood type with Rh factor."""

    A_POSITIVE = "A+"
    A_NEGATIVE = "A-"
    B_POSITIVE = "B+"
    B_NEGATIVE = "B-"
    AB_POSITIVE = "AB+"
    AB_NEGATIVE = "AB-"
    O_POSITIVE = "O+"
    O_NEGATIVE = "O-"


class AuthStatus(str, Enum):
    """Lifecycle status of the client-side auth state."""

    SIGNED_OUT = "signed_out"
    AUTHENTICATING = "authenticating"
    SIGNED_IN = "signed_in"
    ERROR = "error"


class ValidationResult(BaseModel):
    """Result of a single field validation check."""

    valid: bool
    error: Optional[str] = None

    model_config = {"frozen": True}

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def fail(cls, message: str) -> "ValidationResult":
        return cls(valid=False, error=message)


class AuthResult(BaseModel, Generic[T]):
    """
    Outcome of a client-side auth operation.

    Exactly one of ``data`` and ``error`` is meaningful: operations never
    raise, they report failures here.
    """

    data: Optional[T] = None
    error: Optional[AuthError] = None

    model_config = {"arbitrary_types_allowed": True}

    @property
    def ok(self) -> bool:
        return self.error is None


# =============================================================================
# Credentials and requests
# =============================================================================


class SignUpCredentials(BaseModel):
    """Registration form input. Validated by the service, not here."""

    email: str = Field(..., description="Email address")
    password: str = Field(..., description="Plaintext password")
    first_name: str = Field(..., description="Given name")
    last_name: str = Field(..., description="Family name")
    date_of_birth: str = Field(..., description="ISO date, YYYY-MM-DD")
    gender: str = Field(..., description="male or female")
    country_code: str = Field(..., description="Calling code, e.g. +966")
    phone: str = Field(..., description="National number without calling code")
    captcha_token: Optional[str] = Field(None, description="CAPTCHA response token")


class SignInCredentials(BaseModel):
    email: str
    password: str
    captcha_token: Optional[str] = None


class ProfileUpdate(BaseModel):
    """
    Partial profile update.

    Only fields that are set are validated and written. The derived full
    name is not part of this model and cannot be written directly.
    """

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    gender: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    blood_type: Optional[BloodType] = None
    allergies: Optional[str] = None
    chronic_conditions: Optional[str] = None
    height_cm: Optional[float] = None
    weight_kg: Optional[float] = None
    medical_notes: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    insurance_provider: Optional[str] = None
    insurance_policy_number: Optional[str] = None
    avatar_url: Optional[str] = None

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "extra": "forbid",
    }


# =============================================================================
# Provider-facing entities
# =============================================================================


class AuthUser(BaseModel):
    """The identity record as reported by the provider."""

    id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    email_verified: bool = False
    role: Optional[str] = None
    user_metadata: dict = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    last_sign_in_at: Optional[datetime] = None

    model_config = {"frozen": True}


class AuthSession(BaseModel):
    """An authenticated session: access token, refresh token and expiry."""

    access_token: str
    refresh_token: str
    expires_in: Optional[int] = None
    # Unix seconds
    expires_at: Optional[int] = None
    token_type: str = "bearer"
    user: Optional[AuthUser] = None

    model_config = {"frozen": True}


class AuthPayload(BaseModel):
    """User and session returned by sign-up and sign-in."""

    user: Optional[AuthUser] = None
    session: Optional[AuthSession] = None


class UserProfile(BaseModel):
    """A row of the profiles table."""

    id: str = Field(..., description="User ID (UUID)")
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = Field(None, description="Generated from first and last name")
    gender: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    blood_type: Optional[str] = None
    allergies: Optional[str] = None
    chronic_conditions: Optional[str] = None
    height_cm: Optional[float] = None
    weight_kg: Optional[float] = None
    medical_notes: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    insurance_provider: Optional[str] = None
    insurance_policy_number: Optional[str] = None
    avatar_url: Optional[str] = None
    is_profile_complete: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class AuthState(BaseModel):
    """Snapshot published to auth state subscribers."""

    status: AuthStatus = AuthStatus.SIGNED_OUT
    user: Optional[AuthUser] = None
    session: Optional[AuthSession] = None
    profile: Optional[UserProfile] = None
    error: Optional[AuthError] = None

    model_config = {"frozen": True}

    @property
    def loading(self) -> bool:
        return self.status == AuthStatus.AUTHENTICATING

    @property
    def is_authenticated(self) -> bool:
        """Whether a live session is held, whatever the last operation reported."""
        return self.session is not None and self.user is not None


class TokenVerification(BaseModel):
    """Answer of the server-side token verifier."""

    valid: bool
    user: Optional[AuthenticatedUser] = None
    error: Optional[str] = None
