"""
Authentication endpoints.

All routes here sit behind the strict per-IP auth budget.
"""

import logging

from fastapi import APIRouter, Depends, Request

from modules.auth.exceptions import InvalidTokenError, MissingTokenError
from modules.auth.interfaces import ITokenVerifier
from shared.models import AuthenticatedUser

from ..middleware.auth import get_token_verifier
from ..middleware.rate_limit import auth_rate_limit
from ..models.auth import VerifyTokenResponse
from ..models.errors import ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(auth_rate_limit)])


@router.post(
    "/verify",
    response_model=VerifyTokenResponse,
    responses={
        401: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def verify_token(
    request: Request,
    verifier: ITokenVerifier = Depends(get_token_verifier),
) -> VerifyTokenResponse:
    """
    Verify the bearer token in the Authorization header.

    Returns 200 with the resolved user, 401 when the header is missing,
    malformed or the token is rejected, and 503 when verification is not
    configured.
    """
    token = verifier.extract_token(request.headers.get("Authorization"))
    if token is None:
        raise MissingTokenError("No authorization token provided")

    verification = await verifier.verify(token)
    if not verification.valid or verification.user is None:
        logger.warning("Token verification failed: %s", verification.error)
        raise InvalidTokenError(verification.error or "Invalid token")

    user: AuthenticatedUser = verification.user
    return VerifyTokenResponse(valid=True, user=user)
