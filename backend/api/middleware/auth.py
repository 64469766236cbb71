"""
Bearer token authentication dependency.

Tokens are resolved by the token verifier stored on the application at
startup. Without a verifier every protected route fails closed with 503,
before any handler logic runs.
"""

from typing import Optional

from fastapi import Depends, Request

from modules.auth.exceptions import AuthUnavailableError, InvalidTokenError, MissingTokenError
from modules.auth.interfaces import ITokenVerifier
from shared.models import AuthenticatedUser


def get_token_verifier(request: Request) -> ITokenVerifier:
    """
    Dependency returning the configured verifier.

    Raises:
        AuthUnavailableError: No verifier configured (503)
    """
    verifier: Optional[ITokenVerifier] = getattr(request.app.state, "token_verifier", None)
    if verifier is None:
        raise AuthUnavailableError()
    return verifier


async def get_current_user(
    request: Request,
    verifier: ITokenVerifier = Depends(get_token_verifier),
) -> AuthenticatedUser:
    """
    Dependency that requires authentication.

    Use this for endpoints that require a logged-in user.

    Usage:
        @router.get("/protected")
        async def protected_route(user: AuthenticatedUser = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    token = verifier.extract_token(request.headers.get("Authorization"))
    if token is None:
        raise MissingTokenError()

    verification = await verifier.verify(token)
    if not verification.valid or verification.user is None:
        raise InvalidTokenError(verification.error or "Invalid token")

    return verification.user
