# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from pydantic import BaseModel


class AdminUser(BaseModel):
    """Operator authenticated for the admin file browser."""
    username: str

    class Config:
        frozen = True  # Make immutable
