"""
Centralized configuration for the Aethea backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings should be namespaced (e.g., SUPABASE_*, AUTH_*).
"""

from functools import lru_cache
from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Aethea Medical Platform API"
    app_version: str = "1.0.0"
    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 3001
    reload: bool = False
    max_body_bytes: int = 10 * 1024

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # CORS settings
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:19006",
        "https://aethea.me",
    ]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Per-IP request budgets (seconds)
    api_rate_limit_requests: int = 100
    api_rate_limit_window: int = 15 * 60
    auth_rate_limit_requests: int = 10
    auth_rate_limit_window: int = 15 * 60

    # Sign-in throttling per email
    login_max_attempts: int = 5
    login_window_seconds: int = 15 * 60

    # Refresh the access token this many seconds before expiry
    token_refresh_threshold_seconds: int = 300

    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""

    # Frontend URL (fallback origin for password-reset redirects)
    frontend_url: str = "https://app.aethea.com"

    # Client-side session persistence
    session_storage_path: str = ".aethea/session.json"
    session_secure_storage_path: str = ".aethea/secure-session.json"
    session_encryption_key: Optional[str] = None

    @property
    def is_production(self) -> bool:
        """Whether the backend runs with production guarantees."""
        return self.environment == "production"

    @property
    def supabase_configured(self) -> bool:
        """Whether server-side Supabase credentials are present."""
        return bool(self.supabase_url and self.supabase_service_role_key)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
