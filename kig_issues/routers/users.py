import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ..auth.dependencies import get_current_user, require_admin, require_leader
from ..core.exceptions import StorageError
from ..models.database_models import User
from ..services.data_access import DataAccessService
from ..services.providers import get_data_access

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/me", response_model=User)
async def get_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.get("", response_model=List[User])
async def list_users(
    current_user: User = Depends(require_admin),
    data_access: DataAccessService = Depends(get_data_access),
):
    try:
        return await data_access.get_users()
    except StorageError:
        logger.exception("❌ Loading users failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Loading users failed")


@router.get("/{user_id}", response_model=User)
async def get_user(
    user_id: str,
    current_user: User = Depends(require_leader),
    data_access: DataAccessService = Depends(get_data_access),
):
    try:
        user = await data_access.get_user_by_id(user_id)
    except StorageError:
        logger.exception(f"❌ Loading user {user_id} failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Loading user failed")
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
