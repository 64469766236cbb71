"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

import pytest
from datetime import datetime, timezone
from typing import Any, Optional

from supabase_auth.types import Session, User, UserIdentity

from modules.auth.rate_limiter import reset_rate_limiter
from modules.auth.token_manager import clear_token_cache
from shared.config import Settings
from shared.models import AuthenticatedUser


TEST_USER_ID = "6f1c2b9e-0d4a-4f4e-9a51-3c0d8f2b7a10"
TEST_USER_EMAIL = "jane@example.com"


def build_provider_user(
    user_id: str = TEST_USER_ID,
    email: Optional[str] = TEST_USER_EMAIL,
    confirmed: bool = True,
    identities: Optional[list[UserIdentity]] = None,
    **overrides: Any,
) -> User:
    """Build a provider ``User`` as the Supabase client returns it."""
    now = datetime.now(timezone.utc)
    values: dict[str, Any] = {
        "id": user_id,
        "app_metadata": {"provider": "email"},
        "user_metadata": {"first_name": "Jane"},
        "aud": "authenticated",
        "email": email,
        "created_at": now,
        "email_confirmed_at": now if confirmed else None,
        "role": "authenticated",
        "identities": identities,
    }
    values.update(overrides)
    return User(**values)


def build_provider_session(
    user: Optional[User] = None,
    access_token: str = "access-token",
    expires_in: int = 3600,
    expires_at: Optional[int] = None,
) -> Session:
    """Build a provider ``Session`` wrapping ``user``."""
    return Session(
        access_token=access_token,
        refresh_token="refresh-token",
        expires_in=expires_in,
        expires_at=expires_at,
        token_type="bearer",
        user=user or build_provider_user(),
    )


@pytest.fixture(autouse=True)
def reset_auth_singletons():
    """Reset the process-wide limiter and token cache around each test."""
    reset_rate_limiter()
    clear_token_cache()
    yield
    reset_rate_limiter()
    clear_token_cache()


@pytest.fixture
def make_user():
    return build_provider_user


@pytest.fixture
def make_session():
    return build_provider_session


@pytest.fixture
def test_user_id() -> str:
    """Provide a consistent test user ID."""
    return TEST_USER_ID


@pytest.fixture
def test_user_email() -> str:
    """Provide a consistent test user email."""
    return TEST_USER_EMAIL


@pytest.fixture
def authenticated_user() -> AuthenticatedUser:
    return AuthenticatedUser(id=TEST_USER_ID, email=TEST_USER_EMAIL, email_verified=True)


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Development settings with Supabase configured and storage under tmp_path."""
    return Settings(
        environment="test",
        supabase_url="https://project.supabase.co",
        supabase_anon_key="anon-key",
        supabase_service_role_key="service-role-key",
        session_storage_path=str(tmp_path / "session.json"),
        session_secure_storage_path=str(tmp_path / "secure.json"),
    )


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Authorization header carrying an opaque bearer token."""
    return {"Authorization": "Bearer valid-token"}
