"""Tests for user and profile endpoints."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from api.app import create_app
from modules.auth.errors import AuthError, AuthErrorCode
from modules.auth.models import AuthResult, ProfileUpdate, UserProfile


def profile(user_id: str, **overrides) -> UserProfile:
    values = {
        "id": user_id,
        "email": "jane@example.com",
        "first_name": "Jane",
        "last_name": "Doe",
        "full_name": "Jane Doe",
        "is_profile_complete": True,
    }
    values.update(overrides)
    return UserProfile(**values)


class TestGetMe:
    def test_returns_caller(self, client, auth_headers, test_user_id):
        response = client.get("/api/users/me", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == test_user_id
        assert data["role"] == "authenticated"


class TestGetProfile:
    def test_returns_own_profile(self, client, auth_headers, auth_service, test_user_id):
        auth_service.get_user_profile.return_value = AuthResult(data=profile(test_user_id))

        response = client.get("/api/users/profile", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["fullName"] == "Jane Doe"
        assert data["isProfileComplete"] is True
        auth_service.get_user_profile.assert_awaited_once_with(test_user_id)

    def test_missing_profile_is_404(self, client, auth_headers, auth_service):
        auth_service.get_user_profile.return_value = AuthResult(
            error=AuthError(message="Profile not found", code=AuthErrorCode.USER_NOT_FOUND.value)
        )
        response = client.get("/api/users/profile", headers=auth_headers)
        assert response.status_code == 404
        assert response.json() == {"error": "Profile not found", "code": "PROFILE_NOT_FOUND"}

    def test_provider_failure_is_502(self, client, auth_headers, auth_service):
        auth_service.get_user_profile.return_value = AuthResult(
            error=AuthError(message="Network error. Please try again", code=AuthErrorCode.NETWORK_ERROR.value)
        )
        response = client.get("/api/users/profile", headers=auth_headers)
        assert response.status_code == 502
        assert response.json()["code"] == "PROFILE_SERVICE_ERROR"

    def test_requires_authentication(self, client, auth_service):
        response = client.get("/api/users/profile")
        assert response.status_code == 401
        auth_service.get_user_profile.assert_not_called()


class TestUpdateProfile:
    def test_partial_update(self, client, auth_headers, auth_service, test_user_id):
        auth_service.update_profile.return_value = AuthResult(
            data=profile(test_user_id, first_name="Janet", full_name="Janet Doe", height_cm=170.0)
        )

        response = client.put(
            "/api/users/profile",
            headers=auth_headers,
            json={"firstName": "Janet", "heightCm": 170},
        )

        assert response.status_code == 200
        assert response.json()["fullName"] == "Janet Doe"
        user_id, update = auth_service.update_profile.call_args.args
        assert user_id == test_user_id
        assert isinstance(update, ProfileUpdate)
        assert update.model_fields_set == {"first_name", "height_cm"}

    def test_validation_failure_is_400(self, client, auth_headers, auth_service):
        auth_service.update_profile.return_value = AuthResult(
            error=AuthError(message="Height must be between 30 and 300 cm", code=AuthErrorCode.VALIDATION_ERROR.value)
        )
        response = client.put("/api/users/profile", headers=auth_headers, json={"heightCm": 5})
        assert response.status_code == 400
        assert response.json() == {"error": "Height must be between 30 and 300 cm", "code": "VALIDATION_ERROR"}

    def test_unknown_field_is_rejected(self, client, auth_headers, auth_service):
        response = client.put("/api/users/profile", headers=auth_headers, json={"fullName": "Someone Else"})
        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "VALIDATION_ERROR"
        assert data["details"][0]["field"] == "fullName"
        auth_service.update_profile.assert_not_called()

    def test_bad_blood_type_is_rejected(self, client, auth_headers):
        response = client.put("/api/users/profile", headers=auth_headers, json={"bloodType": "Z"})
        assert response.status_code == 400

    def test_missing_profile_is_404(self, client, auth_headers, auth_service):
        auth_service.update_profile.return_value = AuthResult(
            error=AuthError(message="Profile not found", code=AuthErrorCode.USER_NOT_FOUND.value)
        )
        response = client.put("/api/users/profile", headers=auth_headers, json={"allergies": "None"})
        assert response.status_code == 404


class TestProfileServiceWiring:
    def test_container_builds_service_on_verifier_client(self, settings, token_verifier, supabase_client, test_user_id):
        """Without an injected service, profile reads go through the verifier's client."""
        row = {"id": test_user_id, "email": "jane@example.com", "first_name": "Jane"}
        execute = AsyncMock(return_value=MagicMock(data=[row]))
        supabase_client.table.return_value.select.return_value.eq.return_value.limit.return_value.execute = execute

        client = TestClient(create_app(settings, token_verifier=token_verifier))
        response = client.get("/api/users/profile", headers={"Authorization": "Bearer valid-token"})

        assert response.status_code == 200
        assert response.json()["firstName"] == "Jane"
        supabase_client.table.assert_called_with("profiles")
        supabase_client.table.return_value.select.return_value.eq.assert_called_with("id", test_user_id)

    def test_null_first_name_is_rejected(self, settings, token_verifier, supabase_client):
        client = TestClient(create_app(settings, token_verifier=token_verifier))

        response = client.put(
            "/api/users/profile",
            headers={"Authorization": "Bearer valid-token"},
            json={"firstName": None, "allergies": "None"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "First name: Name is required", "code": "VALIDATION_ERROR"}
        supabase_client.table.return_value.update.assert_not_called()
