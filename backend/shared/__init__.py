"""
Shared infrastructure for the Aethea backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- logging_config: Root logger configuration

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import create_supabase_service_client, create_supabase_user_client
from .exceptions import (
    AetheaError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    RateLimitError,
    ServiceUnavailableError,
    ConfigurationError,
    ExternalServiceError,
)
from .logging_config import setup_logging
from .models import AuthenticatedUser

__all__ = [
    "Settings",
    "get_settings",
    "create_supabase_service_client",
    "create_supabase_user_client",
    "AetheaError",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "RateLimitError",
    "ServiceUnavailableError",
    "ConfigurationError",
    "ExternalServiceError",
    "setup_logging",
    "AuthenticatedUser",
]
