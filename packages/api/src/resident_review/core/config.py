# This project was developed with assistance from AI tools.
"""
Application configuration.

All settings read from environment variables with sensible local dev defaults.
Related settings are grouped together; each group maps to one collaborator or
one workflow concern.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve project root .env regardless of CWD
_PROJECT_ROOT = Path(__file__).resolve().parents[5]
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings -- single source of truth for env-driven config."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -- App --
    APP_NAME: str = "resident-review"
    DEBUG: bool = False

    # -- CORS --
    ALLOWED_HOSTS: list[str] = ["http://localhost:3000"]

    # -- Auth --
    AUTH_DISABLED: bool = Field(
        default=False,
        description="Bypass JWT validation. Set True for tests and local dev without Keycloak.",
    )
    KEYCLOAK_URL: str = "http://localhost:8080"
    KEYCLOAK_REALM: str = "resident-review"
    JWKS_CACHE_TTL: int = Field(
        default=300,
        description="JWKS cache lifetime in seconds (default 5 minutes).",
    )

    # -- Remote backend (resident directory, documents, permissions) --
    BACKEND_BASE_URL: str = Field(
        default="http://localhost:4000",
        description="Base URL of the property-management backend.",
    )
    BACKEND_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        description="Per-request timeout for every backend call.",
    )
    BACKEND_API_KEY: str | None = Field(
        default=None,
        description="Optional service key sent as X-API-Key alongside the operator token.",
    )
    PERMISSIONS_PATH: str = Field(
        default="/auth/me-v2",
        description="Backend path returning the operator's role and permissions.",
    )

    # -- Review workflow --
    DOCUMENT_FETCH_TIMEOUT_SECONDS: float = Field(
        default=15.0,
        description="Upper bound for a single document fetch before it is marked unavailable.",
    )
    REQUIRE_ALL_DOCUMENTS: bool = Field(
        default=False,
        description="Refuse approvals unless both verification documents loaded.",
    )
    BULK_DECISION_CONCURRENCY: int = Field(
        default=4,
        ge=1,
        description="Maximum in-flight decision calls during a bulk action.",
    )
    PENDING_PAGE_LIMIT: int = Field(default=50, ge=1, le=500)
    SESSION_IDLE_TTL_SECONDS: int = Field(
        default=1800,
        description="Operator review sessions idle longer than this are discarded.",
    )

    # -- Capability ids checked by the permission gate --
    CREATE_PAYMENT_PERMISSION_ID: str = "CREATE_PAYMENT"
    APPROVE_RESIDENT_PERMISSION_ID: str = "APPROVE_RESIDENT"


settings = Settings()
