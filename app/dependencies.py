# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
# =============================================================================

from typing import Annotated

from fastapi import Depends

from core.services.storage_service import StorageService


def get_storage() -> type[StorageService]:
    """
    Get the storage service.

    Returns the service class; its methods are static and share the
    singleton Supabase client.
    """
    return StorageService


# Type alias for dependency injection
StorageDep = Annotated[type[StorageService], Depends(get_storage)]
