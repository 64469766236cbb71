"""
User-related endpoints.

Every route requires authentication. Profile access is always scoped to
the authenticated user's own id.
"""

from fastapi import APIRouter, Depends

from modules.auth.errors import AuthError, AuthErrorCode
from modules.auth.exceptions import ProfileNotFoundError
from modules.auth.interfaces import IAuthService
from modules.auth.models import ProfileUpdate, UserProfile
from shared.exceptions import ExternalServiceError, ValidationError
from shared.models import AuthenticatedUser

from ..dependencies import get_auth_service
from ..middleware.auth import get_current_user
from ..models.errors import ErrorResponse, ValidationErrorResponse

router = APIRouter(
    responses={
        401: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)


def _raise_for(error: AuthError, user_id: str) -> None:
    """Translate a failed auth result into the matching API exception."""
    if error.code == AuthErrorCode.VALIDATION_ERROR.value:
        raise ValidationError(error.message, code="VALIDATION_ERROR")
    if error.code == AuthErrorCode.USER_NOT_FOUND.value:
        raise ProfileNotFoundError(user_id)
    raise ExternalServiceError(
        "Profile service unavailable",
        service="supabase",
        code="PROFILE_SERVICE_ERROR",
        details={"reason": error.code},
    )


@router.get("/me", response_model=AuthenticatedUser)
async def get_me(
    user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    """
    Get the authenticated caller's identity.

    Requires authentication.
    """
    return user


@router.get("/profile", response_model=UserProfile, responses={404: {"model": ErrorResponse}})
async def get_profile(
    user: AuthenticatedUser = Depends(get_current_user),
    auth: IAuthService = Depends(get_auth_service),
) -> UserProfile:
    """Get the caller's profile."""
    result = await auth.get_user_profile(user.id)
    if result.error:
        _raise_for(result.error, user.id)
    return result.data


@router.put(
    "/profile",
    response_model=UserProfile,
    responses={400: {"model": ValidationErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_profile(
    update: ProfileUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    auth: IAuthService = Depends(get_auth_service),
) -> UserProfile:
    """
    Apply a partial update to the caller's profile.

    Fields are validated with the same rules as sign-up; the full name is
    derived by the database and cannot be set.
    """
    result = await auth.update_profile(user.id, update)
    if result.error:
        _raise_for(result.error, user.id)
    return result.data
