import pytest
from datetime import date
from pydantic import ValidationError

from modules.auth.errors import AuthError
from modules.auth.models import (
    AuthResult,
    AuthSession,
    AuthState,
    AuthStatus,
    AuthUser,
    BloodType,
    ProfileUpdate,
    UserProfile,
    ValidationResult,
)


class TestValidationResult:
    def test_ok(self):
        result = ValidationResult.ok()
        assert result.valid
        assert result.error is None

    def test_fail(self):
        result = ValidationResult.fail("Name is required")
        assert not result.valid
        assert result.error == "Name is required"


class TestAuthResult:
    def test_ok_when_no_error(self):
        assert AuthResult(data=1).ok
        assert AuthResult().ok

    def test_not_ok_with_error(self):
        assert not AuthResult(error=AuthError(message="x", code="UNKNOWN")).ok


class TestProfileUpdate:
    def test_accepts_camel_case(self):
        update = ProfileUpdate.model_validate({"firstName": "Jane", "bloodType": "AB+", "heightCm": 170})
        assert update.first_name == "Jane"
        assert update.blood_type == BloodType.AB_POSITIVE
        assert update.height_cm == 170

    def test_accepts_snake_case(self):
        assert ProfileUpdate(first_name="Jane").first_name == "Jane"

    def test_rejects_unknown_fields(self):
        with pytest.raises(ValidationError):
            ProfileUpdate.model_validate({"fullName": "Jane Doe"})

    def test_rejects_unknown_blood_type(self):
        with pytest.raises(ValidationError):
            ProfileUpdate.model_validate({"bloodType": "C+"})

    def test_parses_date_of_birth(self):
        update = ProfileUpdate.model_validate({"dateOfBirth": "1990-05-01"})
        assert update.date_of_birth == date(1990, 5, 1)

    def test_tracks_set_fields(self):
        assert ProfileUpdate(allergies=None).model_fields_set == {"allergies"}


class TestUserProfile:
    def test_serializes_with_aliases(self):
        profile = UserProfile(id="user-1", first_name="Jane", emergency_contact_phone="+966512345678")
        data = profile.model_dump(by_alias=True)
        assert data["firstName"] == "Jane"
        assert data["emergencyContactPhone"] == "+966512345678"
        assert data["isProfileComplete"] is False


class TestAuthState:
    def test_default_is_signed_out(self):
        state = AuthState()
        assert state.status == AuthStatus.SIGNED_OUT
        assert not state.loading
        assert not state.is_authenticated

    def test_loading(self):
        assert AuthState(status=AuthStatus.AUTHENTICATING).loading

    def test_authenticated_requires_session(self):
        user = AuthUser(id="user-1")
        session = AuthSession(access_token="a", refresh_token="r", user=user)
        assert AuthState(status=AuthStatus.SIGNED_IN, user=user, session=session).is_authenticated
        assert not AuthState(status=AuthStatus.SIGNED_IN, user=user).is_authenticated

    def test_failed_operation_keeps_authentication(self):
        user = AuthUser(id="user-1")
        session = AuthSession(access_token="a", refresh_token="r", user=user)
        error = AuthError(message="Invalid email or password", code="INVALID_CREDENTIALS")
        state = AuthState(status=AuthStatus.ERROR, user=user, session=session, error=error)
        assert state.is_authenticated
        assert not state.loading

    def test_is_immutable(self):
        with pytest.raises(ValidationError):
            AuthState().status = AuthStatus.SIGNED_IN
