"""
FastAPI providers for the service singletons.

The storage mode is resolved once per process from the configuration and
never re-evaluated per call. Tests swap backends with
`app.dependency_overrides[get_data_access]`.
"""

import logging

from fastapi import Depends

from ..auth.auth_service import AuthService
from ..core.config import StorageMode, resolve_storage_mode
from .data_access import DataAccessService
from .issue_service import IssueService
from .photo_storage_service import PhotoStorageService
from .work_group_service import WorkGroupService

logger = logging.getLogger(__name__)

_storage_mode = None
_data_access = None


def get_storage_mode() -> StorageMode:
    global _storage_mode
    if _storage_mode is None:
        _storage_mode = resolve_storage_mode()
    return _storage_mode


def get_data_access() -> DataAccessService:
    global _data_access
    if _data_access is None:
        _data_access = DataAccessService(get_storage_mode())
    return _data_access


def get_auth_service(data_access: DataAccessService = Depends(get_data_access)) -> AuthService:
    return AuthService(data_access)


def get_issue_service(data_access: DataAccessService = Depends(get_data_access)) -> IssueService:
    return IssueService(data_access)


def get_work_group_service(data_access: DataAccessService = Depends(get_data_access)) -> WorkGroupService:
    return WorkGroupService(data_access)


def get_photo_storage(data_access: DataAccessService = Depends(get_data_access)) -> PhotoStorageService:
    return PhotoStorageService(data_access.mode)
