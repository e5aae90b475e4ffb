from typing import Any, Dict, List, Optional
import logging

from ..models.database_models import ActivityType, Task, WorkGroup
from .activity_log_service import ActivityLogRecorder
from .data_access import DataAccessService

logger = logging.getLogger(__name__)


class WorkGroupService:
    def __init__(self, data_access: DataAccessService, recorder: Optional[ActivityLogRecorder] = None):
        self.data_access = data_access
        self.recorder = recorder or ActivityLogRecorder(data_access)

    async def list_work_groups(self, active_only: bool = False) -> List[WorkGroup]:
        groups = await self.data_access.get_work_groups()
        if active_only:
            groups = [g for g in groups if g.is_active]
        return groups

    async def create_work_group(self, created_by: str, group_data: Dict[str, Any]) -> WorkGroup:
        data = dict(group_data)
        # The leader is always a member
        data["members"] = [data["leader_id"]] + list(data.get("members", []))
        group = await self.data_access.create_work_group(data)
        logger.info(f"Work group {group.id} created by {created_by}")

        await self.recorder.record(
            ActivityType.GROUP_CREATED,
            f"New work group created: {group.name}",
            user_id=created_by,
            related_id=group.id,
        )
        return group

    async def get_tasks(self, work_group_id: str) -> Optional[List[Task]]:
        """Tasks of a work group, or None when the group does not exist."""
        if await self.data_access.get_work_group_by_id(work_group_id) is None:
            return None
        return await self.data_access.get_tasks_by_work_group(work_group_id)

    async def create_task(
        self, work_group_id: str, created_by: str, task_data: Dict[str, Any]
    ) -> Optional[Task]:
        if await self.data_access.get_work_group_by_id(work_group_id) is None:
            return None
        data = dict(task_data)
        data.update(work_group_id=work_group_id, created_by=created_by)
        task = await self.data_access.create_task(data)
        logger.info(f"Task {task.id} created in work group {work_group_id} by {created_by}")
        return task
