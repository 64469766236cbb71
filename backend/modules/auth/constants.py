"""
Authentication constants.

Password policy, throttling budgets, token timing, redirect paths and the
user-facing message catalogue shared by the client and server halves of
the auth module.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class PasswordRules:
    """Password policy. Each character-class requirement can be toggled."""

    min_length: int = 8
    max_length: int = 128
    require_uppercase: bool = True
    require_lowercase: bool = True
    require_number: bool = True
    require_special: bool = True


PASSWORD_RULES = PasswordRules()


class RateLimits:
    """Client-side sign-in throttling."""

    MAX_LOGIN_ATTEMPTS = 5
    LOGIN_WINDOW_MS = 15 * 60 * 1000


class TokenConfig:
    """Access-token timing."""

    # Refresh the token 5 minutes before it expires
    REFRESH_THRESHOLD_SECONDS = 300
    # Used when the provider does not report expires_in
    DEFAULT_EXPIRES_IN_SECONDS = 3600


RESET_PASSWORD_PATH = "/reset-password"
DEFAULT_APP_URL = "https://app.aethea.com"

PROFILES_TABLE = "profiles"


class AuthMessages:
    """User-facing messages."""

    INVALID_CREDENTIALS = "Invalid email or password"
    USER_NOT_FOUND = "User not found"
    EMAIL_ALREADY_EXISTS = "Email already registered"
    EMAIL_ALREADY_REGISTERED_SIGN_IN = "This email is already registered. Please sign in instead."
    WEAK_PASSWORD = "Password must be at least 8 characters long"
    NETWORK_ERROR = "Network error. Please try again"
    SESSION_EXPIRED = "Session expired. Please login again"
    UNAUTHORIZED = "Unauthorized access"
    UNKNOWN_ERROR = "An unexpected error occurred"
    INVALID_EMAIL = "Invalid email format"
    INVALID_DOB = "Please enter a valid date of birth"
    INVALID_GENDER = "Please select a gender"
    INVALID_PHONE = "Please enter a valid phone number"
    PASSWORDS_MISMATCH = "Passwords do not match"
    CAPTCHA_REQUIRED = "Please complete the CAPTCHA verification"
    CAPTCHA_FAILED = "CAPTCHA verification failed. Please complete the verification and try again."
    TOO_MANY_LOGIN_ATTEMPTS = "Too many login attempts. Please try again later."
    TOO_MANY_REQUESTS = "Too many requests. Please try again later."
    EMAIL_NOT_CONFIRMED = "Please confirm your email address."
    PROFILE_NOT_FOUND = "Profile not found"
    HEIGHT_OUT_OF_RANGE = "Height must be between 30 and 300 cm"
    WEIGHT_OUT_OF_RANGE = "Weight must be between 1 and 500 kg"


# Inclusive bounds for profile measurements
HEIGHT_CM_RANGE = (30, 300)
WEIGHT_KG_RANGE = (1, 500)
