# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.STORAGE_BUCKET)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# The Settings class validates all values at startup, catching configuration
# errors early rather than at runtime.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Storage Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,  # ... means required (no default)
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (needed to write and sign objects)"
    )

    STORAGE_BUCKET: str = Field(
        default="print-orders",
        description="Bucket holding raw uploads, prod/ outputs and the hotfolder/"
    )

    SIGNED_URL_EXPIRES_SECONDS: int = Field(
        default=300,
        ge=10,
        le=86400,
        description="Lifetime of signed upload/download URLs"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (for Celery)
    # -------------------------------------------------------------------------
    # Default to localhost for development

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
    )

    RENDER_DISPATCH: Literal["celery", "inline"] = Field(
        default="celery",
        description="Run renders on the Celery worker or in the API thread pool"
    )

    # -------------------------------------------------------------------------
    # Stripe Configuration
    # -------------------------------------------------------------------------

    STRIPE_SECRET_KEY: str = Field(
        default="",
        description="Stripe secret API key"
    )

    STRIPE_WEBHOOK_SECRET: str = Field(
        default="",
        description="Signing secret for the checkout webhook endpoint"
    )

    SUCCESS_URL: str = Field(
        default="https://example.com/success",
        description="Redirect after a successful checkout"
    )

    CANCEL_URL: str = Field(
        default="https://example.com/cancel",
        description="Redirect after a cancelled checkout"
    )

    # -------------------------------------------------------------------------
    # Render Settings
    # -------------------------------------------------------------------------

    RENDER_DPI: int = Field(
        default=300,
        ge=72,
        le=1200,
        description="Raster density used to convert millimeters to pixels"
    )

    JPEG_QUALITY: int = Field(
        default=95,
        ge=1,
        le=100,
        description="JPEG encoder quality for raster output"
    )

    PNG_COMPRESS_LEVEL: int = Field(
        default=9,
        ge=0,
        le=9,
        description="zlib level for PNG raster output"
    )

    DEFAULT_BLEED_MM: float = Field(
        default=3.0,
        ge=0.0,
        le=20.0,
        description="Bleed margin added on every side of the print PDF"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    ADMIN_USER: str = Field(
        default="",
        description="Username for the /admin endpoints (HTTP Basic)"
    )

    ADMIN_PASS: str = Field(
        default="",
        description="Password for the /admin endpoints (HTTP Basic)"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="*",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        # Load from .env file in project root
        env_file=".env",
        env_file_encoding="utf-8",
        # Don't fail if .env doesn't exist (useful for production where
        # env vars are set directly)
        env_ignore_empty=True,
        # Case-sensitive environment variable names
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://shop.example" -> ["http://localhost:3000", "https://shop.example"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def admin_configured(self) -> bool:
        """True when both admin credentials are set."""
        return bool(self.ADMIN_USER and self.ADMIN_PASS)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
