# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Provides HTTP Basic authentication for the admin endpoints.
#
# Usage:
#   from app.auth import get_admin_user, AdminUser
#
#   @router.get("/protected")
#   async def protected(admin: AdminUser = Depends(get_admin_user)):
#       return {"user": admin.username}
# =============================================================================

from app.auth.dependencies import get_admin_user
from app.auth.models import AdminUser

__all__ = [
    "get_admin_user",
    "AdminUser",
]
