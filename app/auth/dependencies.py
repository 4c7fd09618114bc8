# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# HTTP Basic authentication for the /admin endpoints.
#
# Credentials come from ADMIN_USER / ADMIN_PASS. When either is unset the
# admin endpoints reject every request.
#
# Usage:
#   from app.auth import get_admin_user, AdminUser
#
#   @router.get("/admin/files")
#   async def files(admin: AdminUser = Depends(get_admin_user)):
#       ...
# =============================================================================

import logging
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from app.config import settings
from app.auth.models import AdminUser

logger = logging.getLogger(__name__)

REALM = "Admin"

# HTTP Basic credential extractor; missing header is handled below
security = HTTPBasic(realm=REALM, auto_error=False)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Auth required",
        headers={"WWW-Authenticate": f'Basic realm="{REALM}"'},
    )


def _matches(given: str, expected: str) -> bool:
    """Constant-time string comparison."""
    return secrets.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


async def get_admin_user(
    credentials: Optional[HTTPBasicCredentials] = Depends(security)
) -> AdminUser:
    """
    Validate HTTP Basic credentials against the configured admin account.

    Args:
        credentials: Username/password from the Authorization header

    Returns:
        AdminUser for the authenticated operator

    Raises:
        HTTPException: 401 with a Basic challenge if credentials are
            missing, wrong, or no admin account is configured
    """
    if credentials is None:
        raise _unauthorized()

    if not settings.admin_configured:
        logger.warning("Admin request rejected: ADMIN_USER/ADMIN_PASS not configured")
        raise _unauthorized()

    user_ok = _matches(credentials.username, settings.ADMIN_USER)
    pass_ok = _matches(credentials.password, settings.ADMIN_PASS)
    if not (user_ok and pass_ok):
        logger.warning(f"Admin login failed for user '{credentials.username}'")
        raise _unauthorized()

    logger.debug(f"Authenticated admin: {credentials.username}")
    return AdminUser(username=credentials.username)
