from typing import Optional
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..core.exceptions import StorageError
from ..models.database_models import User
from ..models.user import UserRole
from ..services.providers import get_auth_service
from .auth_service import AuthService, has_permission

security = HTTPBearer(auto_error=False)
logger = logging.getLogger(__name__)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """
    Verify the bearer token and return the user it belongs to.
    Raises 401 if the token is missing, invalid, expired or orphaned.
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Not authenticated")

    try:
        user = await auth_service.get_user_from_token(credentials.credentials)
    except StorageError:
        logger.exception("[Auth] ❌ Could not load user for token")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )

    if user is None:
        logger.warning("[Auth] Token verification failed - invalid token")
        raise _unauthorized("Invalid authentication credentials")

    logger.info(f"[Auth] ✅ Authenticated user: {user.email} with role: {user.role.value}")
    return user


def require_role(required_role: UserRole):
    """Dependency factory: the caller's role must rank at or above `required_role`."""

    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        logger.info(f"[Auth] Checking role: user has '{current_user.role.value}', required: '{required_role.value}'")

        if not has_permission(current_user.role, required_role):
            logger.warning(f"[Auth] Role check failed: '{current_user.role.value}' below '{required_role.value}'")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return role_checker


require_admin = require_role(UserRole.ADMIN)
require_leader = require_role(UserRole.WORK_GROUP_LEADER)
require_resident = require_role(UserRole.RESIDENT)
