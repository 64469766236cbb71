"""
Fixtures for API tests.

Apps are built per test with ``create_app`` so limiter state and cached
services never leak between tests. Token verification runs through the
real ``TokenVerifier`` over a mocked Supabase client.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient
from supabase_auth.errors import AuthApiError

from api.app import create_app
from modules.auth.verifier import TokenVerifier
from shared.config import Settings


VALID_TOKEN = "valid-token"


@pytest.fixture
def supabase_client(make_user):
    """Mocked service-role client that accepts only VALID_TOKEN."""
    client = MagicMock()

    async def get_user(token=None):
        if token == VALID_TOKEN:
            return MagicMock(user=make_user())
        raise AuthApiError("invalid JWT: unable to parse or verify signature", 401, "bad_jwt")

    client.auth.get_user = AsyncMock(side_effect=get_user)
    return client


@pytest.fixture
def token_verifier(supabase_client) -> TokenVerifier:
    return TokenVerifier("https://project.supabase.co", "service-role-key", client=supabase_client)


@pytest.fixture
def auth_service():
    """Mocked server-side auth service for profile routes."""
    service = MagicMock()
    service.get_user_profile = AsyncMock()
    service.update_profile = AsyncMock()
    return service


@pytest.fixture
def app(settings: Settings, token_verifier, auth_service):
    app = create_app(settings, token_verifier=token_verifier)
    app.state.container.set_auth_service(auth_service)
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def unconfigured_client() -> TestClient:
    """App running without Supabase credentials in development."""
    settings = Settings(
        _env_file=None,
        environment="development",
        supabase_url="",
        supabase_service_role_key="",
    )
    return TestClient(create_app(settings), raise_server_exceptions=False)
