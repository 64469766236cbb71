"""
Aethea API package.

Provides the FastAPI application serving token verification and the
authenticated user's profile. Serve it through the factory:

    uvicorn api.app:create_app --factory
"""

from .app import create_app

__all__ = ["create_app"]
