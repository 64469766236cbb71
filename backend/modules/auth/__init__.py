"""
Authentication module.

Handles input validation, sign-in throttling, session lifecycle, profile
access and server-side token verification.

Public API:
- IAuthService / AuthService: client-side auth orchestration
- ITokenVerifier / TokenVerifier: bearer token verification for the API
- AuthRepository, IdentityGateway: provider-facing data access
- Session stores: FileStorage, EncryptedFileStorage, SplitStorage
- Models: AuthResult, AuthState, AuthSession, AuthUser, UserProfile, ...
- Auth exceptions: InvalidTokenError, MissingTokenError, AuthUnavailableError, ...
"""

from .interfaces import IAuthService, IRateLimiter, ITokenVerifier
from .models import (
    AuthPayload,
    AuthResult,
    AuthSession,
    AuthState,
    AuthStatus,
    AuthUser,
    BloodType,
    Gender,
    ProfileUpdate,
    SignInCredentials,
    SignUpCredentials,
    TokenVerification,
    UserProfile,
    ValidationResult,
)
from .errors import AuthError, AuthErrorCode, translate_auth_error
from .exceptions import (
    InvalidTokenError,
    MissingTokenError,
    AuthUnavailableError,
    ProfileNotFoundError,
    SessionStorageError,
)
from .gateway import GatewayResult, IdentityGateway
from .rate_limiter import SlidingWindowRateLimiter, get_rate_limiter, reset_rate_limiter
from .repository import AuthRepository
from .service import AuthService, AuthStateChannel, create_auth_service
from .storage import (
    EncryptedFileStorage,
    FileStorage,
    SplitStorage,
    create_session_storage,
    is_sensitive_key,
)
from .verifier import TokenVerifier, initialize_token_verifier

__all__ = [
    # Interfaces
    "IAuthService",
    "IRateLimiter",
    "ITokenVerifier",
    # Models
    "AuthPayload",
    "AuthResult",
    "AuthSession",
    "AuthState",
    "AuthStatus",
    "AuthUser",
    "BloodType",
    "Gender",
    "ProfileUpdate",
    "SignInCredentials",
    "SignUpCredentials",
    "TokenVerification",
    "UserProfile",
    "ValidationResult",
    # Errors
    "AuthError",
    "AuthErrorCode",
    "translate_auth_error",
    # Exceptions
    "InvalidTokenError",
    "MissingTokenError",
    "AuthUnavailableError",
    "ProfileNotFoundError",
    "SessionStorageError",
    # Implementations
    "GatewayResult",
    "IdentityGateway",
    "SlidingWindowRateLimiter",
    "get_rate_limiter",
    "reset_rate_limiter",
    "AuthRepository",
    "AuthService",
    "AuthStateChannel",
    "create_auth_service",
    "EncryptedFileStorage",
    "FileStorage",
    "SplitStorage",
    "create_session_storage",
    "is_sensitive_key",
    "TokenVerifier",
    "initialize_token_verifier",
]
