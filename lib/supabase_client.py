# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a shared Supabase client for the storage layer.
# It implements the singleton pattern to reuse a single client connection
# across API requests and within each worker process.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   bucket = SupabaseClient.bucket("print-orders")
#   data = bucket.download("raw/1718000000000_photo.jpg")
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from supabase import create_client, Client

from app.config import settings

# Set up logging for this module
logger = logging.getLogger(__name__)


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Provides actionable error messages:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper around the Supabase client.

    Implements singleton pattern - one client instance is shared across
    the process. All methods are class methods for easy access without
    instantiation.

    Example:
        files = SupabaseClient.bucket("print-orders").list("prod")
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses the service_role key, which is required for writing to the
        production and hotfolder prefixes and for signing URLs.

        Returns:
            Client: Supabase client instance

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def bucket(cls, name: str) -> Any:
        """Return the storage API scoped to one bucket."""
        return cls.get_client().storage.from_(name)

    @classmethod
    def reset(cls) -> None:
        """Drop the cached client (used by tests and after fork)."""
        cls._instance = None
