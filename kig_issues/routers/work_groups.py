import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ..auth.dependencies import require_admin, require_leader, require_resident
from ..core.exceptions import StorageError
from ..models.database_models import Task, TaskCreate, User, WorkGroup, WorkGroupCreate
from ..services.providers import get_work_group_service
from ..services.work_group_service import WorkGroupService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/work-groups", tags=["work-groups"])


def _storage_failure(action: str) -> HTTPException:
    logger.exception(f"❌ {action} failed")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"{action} failed")


@router.get("", response_model=List[WorkGroup])
async def list_work_groups(
    active_only: bool = False,
    work_group_service: WorkGroupService = Depends(get_work_group_service),
):
    try:
        return await work_group_service.list_work_groups(active_only=active_only)
    except StorageError:
        raise _storage_failure("Loading work groups")


@router.post("", response_model=WorkGroup, status_code=status.HTTP_201_CREATED)
async def create_work_group(
    body: WorkGroupCreate,
    current_user: User = Depends(require_admin),
    work_group_service: WorkGroupService = Depends(get_work_group_service),
):
    try:
        return await work_group_service.create_work_group(current_user.id, body.model_dump())
    except StorageError:
        raise _storage_failure("Creating work group")


@router.get("/{work_group_id}/tasks", response_model=List[Task])
async def list_tasks(
    work_group_id: str,
    current_user: User = Depends(require_resident),
    work_group_service: WorkGroupService = Depends(get_work_group_service),
):
    try:
        tasks = await work_group_service.get_tasks(work_group_id)
    except StorageError:
        raise _storage_failure("Loading tasks")
    if tasks is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Work group not found")
    return tasks


@router.post("/{work_group_id}/tasks", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(
    work_group_id: str,
    body: TaskCreate,
    current_user: User = Depends(require_leader),
    work_group_service: WorkGroupService = Depends(get_work_group_service),
):
    try:
        task = await work_group_service.create_task(work_group_id, current_user.id, body.model_dump())
    except StorageError:
        raise _storage_failure("Creating task")
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Work group not found")
    return task
