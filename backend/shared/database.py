"""
Supabase client factories.

Provides both service-role clients (for backend operations such as token
verification and profile access) and anon-key clients that hold a user's
session (for the client-side auth flow, respecting RLS).
"""

from typing import Optional
from supabase import AsyncClient, AsyncClientOptions, acreate_client
from supabase_auth import AsyncSupportedStorage

from .config import Settings, get_settings

APP_NAME_HEADER = "medical-platform"


async def create_supabase_service_client(supabase_url: str, service_key: str) -> AsyncClient:
    """
    Create a Supabase client with the service role (bypasses RLS).

    The client never refreshes or persists a session of its own; it is used
    to resolve access tokens presented by callers.

    Returns:
        Supabase client configured with the service role key
    """
    return await acreate_client(
        supabase_url,
        service_key,
        options=AsyncClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        ),
    )


async def create_supabase_user_client(
    storage: Optional[AsyncSupportedStorage] = None,
    settings: Optional[Settings] = None,
) -> AsyncClient:
    """
    Create a Supabase client that signs users in and keeps their session.

    Args:
        storage: Session persistence adapter. Defaults to in-memory storage.
        settings: Settings to read credentials from. Defaults to get_settings().

    Returns:
        Supabase client configured with the anon key
    """
    settings = settings or get_settings()
    if not settings.supabase_url or not settings.supabase_anon_key:
        raise RuntimeError(
            "Supabase configuration missing. "
            "Set SUPABASE_URL and SUPABASE_ANON_KEY environment variables."
        )

    options = AsyncClientOptions(
        auto_refresh_token=True,
        persist_session=True,
        flow_type="pkce",
    )
    options.headers["x-app-name"] = APP_NAME_HEADER
    if storage is not None:
        options.storage = storage

    return await acreate_client(
        settings.supabase_url,
        settings.supabase_anon_key,
        options=options,
    )
