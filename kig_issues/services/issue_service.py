from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
import logging

from ..models.database_models import (
    ActivityType,
    Issue,
    IssueCategory,
    IssuePriority,
    IssueStatus,
    MapPin,
)
from .activity_log_service import ActivityLogRecorder
from .data_access import DataAccessService

logger = logging.getLogger(__name__)

MAX_PHOTOS_PER_ISSUE = 5


class IssueService:
    """Issue workflows: writes go through the store, then the activity log."""

    def __init__(self, data_access: DataAccessService, recorder: Optional[ActivityLogRecorder] = None):
        self.data_access = data_access
        self.recorder = recorder or ActivityLogRecorder(data_access)

    async def create_issue(self, reported_by: str, issue_data: Dict[str, Any]) -> Issue:
        data = dict(issue_data)
        data["reported_by"] = reported_by
        data.setdefault("status", IssueStatus.OPEN)
        issue = await self.data_access.create_issue(data)
        logger.info(f"Issue {issue.id} created by {reported_by}")

        await self.recorder.record(
            ActivityType.ISSUE_CREATED,
            f"New issue reported: {issue.title}",
            user_id=issue.reported_by,
            related_id=issue.id,
        )
        return issue

    async def update_issue(
        self, issue_id: str, updates: Dict[str, Any], actor_id: Optional[str] = None
    ) -> Optional[Issue]:
        """Apply a partial update; a status change is written to the activity log."""
        existing = await self.data_access.get_issue_by_id(issue_id)
        if existing is None:
            return None

        changes = dict(updates)
        new_status = changes.get("status")
        if new_status is not None:
            new_status = IssueStatus(new_status)
        status_changed = new_status is not None and new_status != existing.status

        if status_changed:
            if new_status == IssueStatus.RESOLVED:
                changes["resolved_at"] = datetime.now(timezone.utc)
            elif existing.status == IssueStatus.RESOLVED:
                changes["resolved_at"] = None

        updated = await self.data_access.update_issue(issue_id, changes)
        if updated is None:
            return None

        if status_changed:
            activity_type = (
                ActivityType.ISSUE_RESOLVED if new_status == IssueStatus.RESOLVED
                else ActivityType.ISSUE_UPDATED
            )
            await self.recorder.record(
                activity_type,
                f"Issue status changed from {existing.status.value} to {new_status.value}",
                user_id=actor_id or changes.get("assigned_to") or existing.reported_by,
                related_id=issue_id,
                before={"status": existing.status.value},
                after={"status": new_status.value},
            )
        return updated

    async def add_photo(self, issue_id: str, url: str) -> Optional[Issue]:
        issue = await self.data_access.get_issue_by_id(issue_id)
        if issue is None:
            return None
        if len(issue.photos) >= MAX_PHOTOS_PER_ISSUE:
            raise ValueError(f"Maximum {MAX_PHOTOS_PER_ISSUE} photos allowed")
        return await self.data_access.update_issue(issue_id, {"photos": issue.photos + [url]})

    async def list_issues(
        self,
        status: Optional[IssueStatus] = None,
        category: Optional[IssueCategory] = None,
        priority: Optional[IssuePriority] = None,
    ) -> List[Issue]:
        issues = await self.data_access.get_issues()
        filtered = [
            issue for issue in issues
            if (status is None or issue.status == status)
            and (category is None or issue.category == category)
            and (priority is None or issue.priority == priority)
        ]
        filtered.sort(key=lambda i: i.created_at, reverse=True)
        return filtered

    async def get_map_pins(self, **filters) -> List[MapPin]:
        return [
            MapPin(
                id=issue.id,
                latitude=issue.location.latitude,
                longitude=issue.location.longitude,
                status=issue.status,
                category=issue.category,
                title=issue.title,
                priority=issue.priority,
            )
            for issue in await self.list_issues(**filters)
        ]

    async def get_dashboard_stats(self, recent_limit: int = 5) -> Dict[str, Any]:
        issues = await self.list_issues()
        counts = {status: 0 for status in IssueStatus}
        for issue in issues:
            counts[issue.status] += 1
        return {
            "open": counts[IssueStatus.OPEN],
            "inProgress": counts[IssueStatus.IN_PROGRESS],
            "resolved": counts[IssueStatus.RESOLVED],
            "closed": counts[IssueStatus.CLOSED],
            "total": len(issues),
            "recent": issues[:recent_limit],
        }
