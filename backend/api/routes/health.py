"""
Health check and index endpoints.

``/health`` sits outside ``/api`` so it is neither authenticated nor
rate limited.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from pydantic import BaseModel

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: str
    environment: str


class ApiIndexResponse(BaseModel):
    """API index response model."""

    message: str
    version: str
    endpoints: dict[str, str]


def _health(request: Request) -> HealthResponse:
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=request.app.state.settings.environment,
    )


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    return _health(request)


api_router = APIRouter()


@api_router.get("", response_model=ApiIndexResponse)
async def api_index(request: Request) -> ApiIndexResponse:
    settings = request.app.state.settings
    return ApiIndexResponse(
        message=settings.app_name,
        version=settings.app_version,
        endpoints={
            "health": "/health",
            "auth": "/api/auth/*",
            "users": "/api/users/*",
        },
    )


@api_router.get("/health", response_model=HealthResponse)
async def api_health_check(request: Request) -> HealthResponse:
    """Health check under ``/api``, subject to the general rate limit."""
    return _health(request)
