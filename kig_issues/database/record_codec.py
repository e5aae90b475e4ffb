"""
Conversion between entity models and flat storage records.

A record is a flat dict: `partitionKey` and `rowKey` plus scalar fields.
Nested values are stored as JSON strings and parsed back on read; optional
fields are stored as empty strings. Anything that cannot be decoded raises
CorruptRecordError.
"""

import json
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from ..core.exceptions import CorruptRecordError
from ..models.database_models import ActivityLog, Issue, Task, User, WorkGroup
from .collections import PARTITIONS


def _iso(value: Optional[datetime]) -> str:
    return value.isoformat() if value else ""


def _opt(value: Any) -> Any:
    return value if value is not None else ""


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def _dump_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


class _RecordReader:
    """Field accessors bound to one record so errors name the exact row."""

    def __init__(self, record: Dict[str, Any]):
        self.record = record
        self.partition_key = str(record.get("partitionKey", ""))
        self.row_key = str(record.get("rowKey", ""))

    def corrupt(self, field: str, reason: str) -> CorruptRecordError:
        return CorruptRecordError(self.partition_key, self.row_key, field, reason)

    def optional(self, field: str) -> Any:
        value = self.record.get(field)
        if value is None or value == "":
            return None
        return value

    def json(self, field: str, default: Any) -> Any:
        raw = self.record.get(field)
        if raw is None or raw == "":
            return default
        if not isinstance(raw, str):
            raise self.corrupt(field, f"expected JSON string, got {type(raw).__name__}")
        try:
            return json.loads(raw)
        except ValueError as e:
            raise self.corrupt(field, f"invalid JSON: {e}") from e

    def timestamp(self, field: str) -> Optional[datetime]:
        raw = self.optional(field)
        if raw is None:
            return None
        if isinstance(raw, datetime):
            return raw
        try:
            return datetime.fromisoformat(str(raw))
        except ValueError as e:
            raise self.corrupt(field, f"invalid timestamp: {raw!r}") from e

    def build(self, model: Callable[..., Any], **fields) -> Any:
        try:
            return model(**fields)
        except ValidationError as e:
            bad = e.errors()[0]
            field = ".".join(str(p) for p in bad.get("loc", ())) or "?"
            raise self.corrupt(field, bad.get("msg", "invalid value")) from e


# ──────────────────────────────────────────────────────────────────────────────
# User
# ──────────────────────────────────────────────────────────────────────────────

def user_to_record(user: User) -> Dict[str, Any]:
    return {
        "partitionKey": PARTITIONS["users"],
        "rowKey": user.id,
        "email": user.email,
        "name": user.name,
        "role": _enum_value(user.role),
        "profilePicture": _opt(user.profile_picture),
        "phone": _opt(user.phone),
        "workGroup": _opt(user.work_group),
        "passwordHash": _opt(user.password_hash),
        "createdAt": _iso(user.created_at),
        "updatedAt": _iso(user.updated_at),
    }


def record_to_user(record: Dict[str, Any]) -> User:
    r = _RecordReader(record)
    return r.build(
        User,
        id=r.row_key,
        email=record.get("email"),
        name=record.get("name"),
        role=record.get("role"),
        profile_picture=r.optional("profilePicture"),
        phone=r.optional("phone"),
        work_group=r.optional("workGroup"),
        password_hash=r.optional("passwordHash"),
        created_at=r.timestamp("createdAt"),
        updated_at=r.timestamp("updatedAt"),
    )


# ──────────────────────────────────────────────────────────────────────────────
# Issue
# ──────────────────────────────────────────────────────────────────────────────

def issue_to_record(issue: Issue) -> Dict[str, Any]:
    return {
        "partitionKey": PARTITIONS["issues"],
        "rowKey": issue.id,
        "title": issue.title,
        "description": issue.description,
        "category": _enum_value(issue.category),
        "status": _enum_value(issue.status),
        "priority": _enum_value(issue.priority),
        "location": _dump_json(issue.location.model_dump()),
        "photos": _dump_json(list(issue.photos)),
        "reportedBy": issue.reported_by,
        "assignedTo": _opt(issue.assigned_to),
        "workGroup": _opt(issue.work_group),
        "createdAt": _iso(issue.created_at),
        "updatedAt": _iso(issue.updated_at),
        "resolvedAt": _iso(issue.resolved_at),
        "estimatedCost": issue.estimated_cost or 0,
        "donationGoal": issue.donation_goal or 0,
        "donationsReceived": issue.donations_received or 0,
    }


def record_to_issue(record: Dict[str, Any]) -> Issue:
    r = _RecordReader(record)
    location = r.json("location", None)
    if not isinstance(location, dict):
        raise r.corrupt("location", "missing or not an object")
    photos = r.json("photos", [])
    if not isinstance(photos, list):
        raise r.corrupt("photos", "not a list")
    return r.build(
        Issue,
        id=r.row_key,
        title=record.get("title"),
        description=record.get("description"),
        category=record.get("category"),
        status=record.get("status"),
        priority=record.get("priority"),
        location=location,
        photos=photos,
        reported_by=record.get("reportedBy"),
        assigned_to=r.optional("assignedTo"),
        work_group=r.optional("workGroup"),
        created_at=r.timestamp("createdAt"),
        updated_at=r.timestamp("updatedAt"),
        resolved_at=r.timestamp("resolvedAt"),
        estimated_cost=r.optional("estimatedCost"),
        donation_goal=r.optional("donationGoal"),
        donations_received=r.optional("donationsReceived"),
    )


# ──────────────────────────────────────────────────────────────────────────────
# WorkGroup
# ──────────────────────────────────────────────────────────────────────────────

def work_group_to_record(group: WorkGroup) -> Dict[str, Any]:
    return {
        "partitionKey": PARTITIONS["work_groups"],
        "rowKey": group.id,
        "name": group.name,
        "description": group.description,
        "leaderId": group.leader_id,
        "members": _dump_json(list(group.members)),
        "area": group.area,
        "specialization": _dump_json([_enum_value(s) for s in group.specialization]),
        "category": _opt(group.category),
        "isActive": group.is_active,
        "contactInfo": _dump_json(group.contact_info.model_dump(exclude_none=True)),
        "createdAt": _iso(group.created_at),
        "updatedAt": _iso(group.updated_at),
    }


def record_to_work_group(record: Dict[str, Any]) -> WorkGroup:
    r = _RecordReader(record)
    is_active = record.get("isActive")
    return r.build(
        WorkGroup,
        id=r.row_key,
        name=record.get("name"),
        description=record.get("description") or "",
        leader_id=record.get("leaderId"),
        members=r.json("members", []),
        area=record.get("area") or "",
        specialization=r.json("specialization", []),
        category=r.optional("category"),
        is_active=True if is_active is None else is_active,
        contact_info=r.json("contactInfo", {}),
        created_at=r.timestamp("createdAt"),
        updated_at=r.timestamp("updatedAt"),
    )


# ──────────────────────────────────────────────────────────────────────────────
# Task
# ──────────────────────────────────────────────────────────────────────────────

def task_to_record(task: Task) -> Dict[str, Any]:
    return {
        "partitionKey": PARTITIONS["tasks"],
        "rowKey": task.id,
        "title": task.title,
        "description": task.description,
        "workGroupId": task.work_group_id,
        "assignedTo": _opt(task.assigned_to),
        "status": _enum_value(task.status),
        "priority": _enum_value(task.priority),
        "dueDate": _opt(task.due_date),
        "issueId": _opt(task.issue_id),
        "createdBy": task.created_by,
        "createdAt": _iso(task.created_at),
        "updatedAt": _iso(task.updated_at),
        "completedAt": _iso(task.completed_at),
    }


def record_to_task(record: Dict[str, Any]) -> Task:
    r = _RecordReader(record)
    return r.build(
        Task,
        id=r.row_key,
        title=record.get("title"),
        description=record.get("description") or "",
        work_group_id=record.get("workGroupId"),
        assigned_to=r.optional("assignedTo"),
        status=record.get("status"),
        priority=record.get("priority"),
        due_date=r.optional("dueDate"),
        issue_id=r.optional("issueId"),
        created_by=record.get("createdBy"),
        created_at=r.timestamp("createdAt"),
        updated_at=r.timestamp("updatedAt"),
        completed_at=r.timestamp("completedAt"),
    )


# ──────────────────────────────────────────────────────────────────────────────
# ActivityLog
# ──────────────────────────────────────────────────────────────────────────────

def activity_log_to_record(log: ActivityLog) -> Dict[str, Any]:
    return {
        "partitionKey": PARTITIONS["activity"],
        "rowKey": log.id,
        "id": log.id,
        "type": _enum_value(log.type),
        "description": log.description,
        "userId": log.user_id,
        "relatedId": _opt(log.related_id),
        "beforeData": _dump_json(log.before_data) if log.before_data else "",
        "afterData": _dump_json(log.after_data) if log.after_data else "",
        "createdAt": _iso(log.created_at),
    }


def record_to_activity_log(record: Dict[str, Any]) -> ActivityLog:
    r = _RecordReader(record)
    return r.build(
        ActivityLog,
        id=record.get("id") or r.row_key,
        type=record.get("type"),
        description=record.get("description"),
        user_id=record.get("userId"),
        related_id=r.optional("relatedId"),
        before_data=r.json("beforeData", None),
        after_data=r.json("afterData", None),
        created_at=r.timestamp("createdAt"),
    )


ENCODERS = {
    "users": user_to_record,
    "issues": issue_to_record,
    "work_groups": work_group_to_record,
    "tasks": task_to_record,
    "activity": activity_log_to_record,
}

DECODERS = {
    "users": record_to_user,
    "issues": record_to_issue,
    "work_groups": record_to_work_group,
    "tasks": record_to_task,
    "activity": record_to_activity_log,
}
