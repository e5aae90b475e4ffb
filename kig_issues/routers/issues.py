import logging
import re
import time
from pathlib import PurePath
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from ..auth.auth_service import can_manage_issue, has_permission
from ..auth.dependencies import get_current_user, require_resident
from ..core.exceptions import StorageError
from ..models.database_models import (
    Issue,
    IssueCategory,
    IssueCreate,
    IssuePriority,
    IssueStatus,
    IssueUpdate,
    MapPin,
    User,
)
from ..models.user import UserRole
from ..services.issue_service import MAX_PHOTOS_PER_ISSUE, IssueService
from ..services.photo_storage_service import PhotoStorageService
from ..services.providers import get_issue_service, get_photo_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["issues"])

# Fields only leaders and admins may change
TRIAGE_FIELDS = {"assigned_to", "work_group"}


def _storage_failure(action: str) -> HTTPException:
    logger.exception(f"❌ {action} failed")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"{action} failed")


def _photo_file_name(original: Optional[str]) -> str:
    name = PurePath(original or "").name
    name = re.sub(r"[^A-Za-z0-9._-]", "_", name).strip("._") or "photo"
    return f"{int(time.time() * 1000)}_{name}"


async def _read_photo(file: UploadFile, photo_storage: PhotoStorageService) -> tuple:
    data = await file.read()
    content_type = photo_storage.validate_photo(file.filename, file.content_type, len(data))
    return data, content_type


@router.get("/issues", response_model=List[Issue])
async def list_issues(
    status_filter: Optional[IssueStatus] = Query(None, alias="status"),
    category: Optional[IssueCategory] = None,
    priority: Optional[IssuePriority] = None,
    issue_service: IssueService = Depends(get_issue_service),
):
    """All issues, newest first, optionally filtered."""
    try:
        return await issue_service.list_issues(status=status_filter, category=category, priority=priority)
    except StorageError:
        raise _storage_failure("Loading issues")


@router.get("/issues/map", response_model=List[MapPin])
async def list_map_pins(
    status_filter: Optional[IssueStatus] = Query(None, alias="status"),
    category: Optional[IssueCategory] = None,
    priority: Optional[IssuePriority] = None,
    issue_service: IssueService = Depends(get_issue_service),
):
    try:
        return await issue_service.get_map_pins(status=status_filter, category=category, priority=priority)
    except StorageError:
        raise _storage_failure("Loading map")


@router.get("/issues/stats")
async def issue_stats(issue_service: IssueService = Depends(get_issue_service)):
    """Status counts and the five most recent issues for the dashboard."""
    try:
        return await issue_service.get_dashboard_stats()
    except StorageError:
        raise _storage_failure("Loading dashboard")


@router.get("/issues/{issue_id}", response_model=Issue)
async def get_issue(issue_id: str, issue_service: IssueService = Depends(get_issue_service)):
    try:
        issue = await issue_service.data_access.get_issue_by_id(issue_id)
    except StorageError:
        raise _storage_failure("Loading issue")
    if issue is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Issue not found")
    return issue


@router.post("/issues", response_model=Issue, status_code=status.HTTP_201_CREATED)
async def create_issue(
    body: IssueCreate,
    current_user: User = Depends(require_resident),
    issue_service: IssueService = Depends(get_issue_service),
):
    try:
        return await issue_service.create_issue(current_user.id, body.model_dump())
    except StorageError:
        raise _storage_failure("Reporting issue")


@router.patch("/issues/{issue_id}", response_model=Issue)
async def update_issue(
    issue_id: str,
    body: IssueUpdate,
    current_user: User = Depends(get_current_user),
    issue_service: IssueService = Depends(get_issue_service),
):
    """
    Partial update. Reporters, the assigned leader and admins may edit;
    only leaders and admins may (re)assign.
    """
    updates = body.model_dump(exclude_unset=True)
    try:
        issue = await issue_service.data_access.get_issue_by_id(issue_id)
        if issue is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Issue not found")
        if not can_manage_issue(current_user, issue):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions")
        if TRIAGE_FIELDS & updates.keys() and not has_permission(current_user.role, UserRole.WORK_GROUP_LEADER):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only leaders can assign issues")

        updated = await issue_service.update_issue(issue_id, updates, actor_id=current_user.id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageError:
        raise _storage_failure("Updating issue")

    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Issue not found")
    return updated


@router.post("/issues/{issue_id}/photos")
async def upload_issue_photo(
    issue_id: str,
    file: UploadFile = File(..., description="Photo to attach"),
    current_user: User = Depends(get_current_user),
    issue_service: IssueService = Depends(get_issue_service),
    photo_storage: PhotoStorageService = Depends(get_photo_storage),
):
    try:
        issue = await issue_service.data_access.get_issue_by_id(issue_id)
        if issue is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Issue not found")
        if not can_manage_issue(current_user, issue):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions")
        if len(issue.photos) >= MAX_PHOTOS_PER_ISSUE:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Maximum {MAX_PHOTOS_PER_ISSUE} photos allowed",
            )

        data, content_type = await _read_photo(file, photo_storage)
        url = await photo_storage.upload_photo(data, _photo_file_name(file.filename), issue_id, content_type)
        updated = await issue_service.add_photo(issue_id, url)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageError:
        raise _storage_failure("Photo upload")

    return {"success": True, "url": url, "issue": updated}


@router.post("/uploads/photos")
async def upload_temp_photo(
    file: UploadFile = File(..., description="Photo to upload before the issue exists"),
    current_user: User = Depends(require_resident),
    photo_storage: PhotoStorageService = Depends(get_photo_storage),
):
    """Upload into the shared `temp` scope; the URL is then sent with the new issue."""
    data, content_type = await _read_photo(file, photo_storage)
    try:
        url = await photo_storage.upload_photo(data, _photo_file_name(file.filename), "temp", content_type)
    except StorageError:
        raise _storage_failure("Photo upload")
    logger.info(f"Temporary photo uploaded by {current_user.id}")
    return {"success": True, "url": url}
