import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..core.exceptions import StorageError
from ..models.database_models import ActivityLog
from ..services.data_access import DataAccessService
from ..services.providers import get_data_access

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/activity", tags=["activity"])


@router.get("", response_model=List[ActivityLog])
async def recent_activity(
    limit: int = Query(10, ge=1, le=100),
    data_access: DataAccessService = Depends(get_data_access),
):
    """Community activity feed, newest first."""
    try:
        return await data_access.get_activity_logs(limit=limit)
    except StorageError:
        logger.exception("❌ Loading activity failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Loading activity failed",
        )
