"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from modules.auth.interfaces import IRateLimiter, ITokenVerifier
from modules.auth.rate_limiter import SlidingWindowRateLimiter
from modules.auth.verifier import initialize_token_verifier
from shared.config import Settings, get_settings
from shared.exceptions import ConfigurationError
from shared.logging_config import setup_logging

from .dependencies import ServiceContainer
from .exception_handlers import setup_exception_handlers
from .middleware.rate_limit import api_rate_limit
from .middleware.security import BodySizeLimitMiddleware, security_headers
from .routes import auth, health, users

logger = logging.getLogger(__name__)

AUTH_NOT_CONFIGURED_MESSAGE = (
    "FATAL: SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set in production. "
    "The server refuses to start without authentication configured."
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs startup and shutdown logic.
    """
    # Startup
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_json)
    logger.info(
        "Starting %s on %s:%s (environment=%s)",
        settings.app_name,
        settings.host,
        settings.port,
        settings.environment,
    )
    if app.state.token_verifier is None:
        logger.warning("Token verification disabled; protected routes will answer 503")
    yield
    # Shutdown
    logger.info("Shutting down %s", settings.app_name)


def create_app(
    settings: Optional[Settings] = None,
    token_verifier: Optional[ITokenVerifier] = None,
    rate_limiter: Optional[IRateLimiter] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to run with, loaded from the environment by default
        token_verifier: Pre-built verifier, built from settings by default
        rate_limiter: Per-IP request budgets, an in-memory limiter by default.
            Pass one backed by a shared store when running several workers.

    Returns:
        Configured FastAPI instance

    Raises:
        ConfigurationError: Production settings without Supabase credentials
    """
    settings = settings or get_settings()

    if settings.is_production and not settings.supabase_configured and token_verifier is None:
        raise ConfigurationError(AUTH_NOT_CONFIGURED_MESSAGE, code="AUTH_NOT_CONFIGURED")

    if token_verifier is None:
        token_verifier = initialize_token_verifier(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Authentication and profile API for the Aethea medical platform",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
        openapi_url="/api/openapi.json" if settings.debug else None,
    )

    app.state.settings = settings
    app.state.token_verifier = token_verifier
    app.state.rate_limiter = rate_limiter if rate_limiter is not None else SlidingWindowRateLimiter()
    app.state.container = ServiceContainer(settings, token_verifier)

    # Last added runs outermost: CORS, then security headers, then the body limit
    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)
    app.middleware("http")(security_headers)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    setup_exception_handlers(app)

    # Register routes
    api_limit = [Depends(api_rate_limit)]
    app.include_router(health.router, tags=["health"])
    app.include_router(health.api_router, prefix="/api", tags=["health"], dependencies=api_limit)
    app.include_router(auth.router, prefix="/api/auth", tags=["auth"], dependencies=api_limit)
    app.include_router(users.router, prefix="/api/users", tags=["users"], dependencies=api_limit)

    return app

