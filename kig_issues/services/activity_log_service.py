from typing import Any, Dict, Optional
import logging

from ..models.database_models import ActivityLog, ActivityType
from .data_access import DataAccessService

logger = logging.getLogger(__name__)


class ActivityLogRecorder:
    """Appends audit entries. Failures are logged and never reach the caller."""

    def __init__(self, data_access: DataAccessService):
        self.data_access = data_access

    async def record(
        self,
        type: ActivityType,
        description: str,
        user_id: str,
        related_id: Optional[str] = None,
        before: Optional[Dict[str, Any]] = None,
        after: Optional[Dict[str, Any]] = None,
    ) -> Optional[ActivityLog]:
        try:
            log = await self.data_access.create_activity_log({
                "type": type,
                "description": description,
                "user_id": user_id,
                "related_id": related_id,
                "before_data": before,
                "after_data": after,
            })
            logger.info(f"Activity recorded: {log.type.value} related_id={related_id}")
            return log
        except Exception:
            logger.exception(f"Failed to record activity '{type}' for related_id={related_id}")
            return None
