"""
Seed data for MOCK storage mode.

Demo logins: admin@kig.com / admin123 and leader@kig.com / leader123.
"""

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, List

from ..auth.security import hash_password
from ..models.database_models import ActivityLog, Issue, Task, User, WorkGroup
from .collections import PARTITIONS, collection_name
from .record_codec import ENCODERS

DEMO_CREDENTIALS = {
    "admin@kig.com": "admin123",
    "leader@kig.com": "leader123",
}


@lru_cache(maxsize=None)
def _demo_password_hash(password: str) -> str:
    return hash_password(password)


def _users(now: datetime) -> List[User]:
    return [
        User(
            id="1",
            email="admin@kig.com",
            name="Admin User",
            role="admin",
            password_hash=_demo_password_hash(DEMO_CREDENTIALS["admin@kig.com"]),
            created_at=now,
            updated_at=now,
        ),
        User(
            id="2",
            email="leader@kig.com",
            name="Work Group Leader",
            role="workGroupLeader",
            work_group="maintenance",
            password_hash=_demo_password_hash(DEMO_CREDENTIALS["leader@kig.com"]),
            created_at=now,
            updated_at=now,
        ),
    ]


def _issues(now: datetime) -> List[Issue]:
    return [
        Issue(
            id="1",
            title="Water pipe burst on Main Street",
            description="Large water pipe has burst causing flooding on Main Street near the shopping center.",
            category="water",
            status="open",
            priority="high",
            location={"latitude": -34.0373, "longitude": 23.0474, "address": "Main Street, Knysna"},
            reported_by="2",
            created_at=now,
            updated_at=now,
        ),
        Issue(
            id="2",
            title="Street light not working",
            description="Street light at corner of Queen Street and Grey Street has been out for 3 days.",
            category="lights",
            status="inProgress",
            priority="medium",
            location={"latitude": -34.0383, "longitude": 23.0484, "address": "Queen Street & Grey Street, Knysna"},
            reported_by="2",
            assigned_to="1",
            created_at=now,
            updated_at=now,
        ),
    ]


def _work_groups(now: datetime) -> List[WorkGroup]:
    return [
        WorkGroup(
            id="1",
            name="Water & Sewerage Team",
            description="Handling all water and sewerage related issues in Knysna",
            leader_id="2",
            members=["1", "2"],
            area="Central Knysna",
            specialization=["water", "sewer"],
            category="water",
            contact_info={"email": "water@kig.com", "phone": "+27 44 382 6000"},
            created_at=now,
            updated_at=now,
        ),
        WorkGroup(
            id="2",
            name="Infrastructure Maintenance",
            description="General infrastructure maintenance and repairs",
            leader_id="1",
            members=["1", "2"],
            area="Greater Knysna",
            specialization=["roads", "lights", "drainage"],
            category="general",
            contact_info={"email": "maintenance@kig.com"},
            created_at=now,
            updated_at=now,
        ),
    ]


def _tasks(now: datetime) -> List[Task]:
    return [
        Task(
            id="1",
            title="Repair Main Street water pipe",
            description="Emergency repair needed for burst water pipe on Main Street",
            work_group_id="1",
            assigned_to="2",
            status="in-progress",
            priority="high",
            due_date="2025-06-05",
            issue_id="1",
            created_by="1",
            created_at=now,
            updated_at=now,
        ),
        Task(
            id="2",
            title="Install replacement street light",
            description="Replace broken street light at Queen Street intersection",
            work_group_id="2",
            assigned_to="1",
            status="pending",
            priority="medium",
            due_date="2025-06-10",
            issue_id="2",
            created_by="2",
            created_at=now,
            updated_at=now,
        ),
    ]


def _activity(now: datetime) -> List[ActivityLog]:
    return [
        ActivityLog(
            id="1",
            type="issueCreated",
            description="New issue reported: Water pipe burst on Main Street",
            user_id="2",
            related_id="1",
            created_at=now - timedelta(minutes=30),
        ),
        ActivityLog(
            id="2",
            type="issueUpdated",
            description="Issue status changed from open to inProgress",
            user_id="1",
            related_id="2",
            before_data={"status": "open"},
            after_data={"status": "inProgress"},
            created_at=now - timedelta(hours=2),
        ),
        ActivityLog(
            id="3",
            type="userJoined",
            description="New user joined the community",
            user_id="2",
            created_at=now - timedelta(hours=4),
        ),
    ]


def build_seed(prefix: str = "") -> Dict[str, List[Dict[str, Any]]]:
    """Fixture records keyed by physical collection name."""
    now = datetime.now(timezone.utc)
    entities = {
        "users": _users(now),
        "issues": _issues(now),
        "work_groups": _work_groups(now),
        "tasks": _tasks(now),
        "activity": _activity(now),
    }
    seed = {
        collection_name(kind, prefix): [ENCODERS[kind](e) for e in items]
        for kind, items in entities.items()
    }
    seed[collection_name("user_emails", prefix)] = [
        {
            "partitionKey": PARTITIONS["user_emails"],
            "rowKey": user.email,
            "userId": user.id,
            "createdAt": now.isoformat(),
        }
        for user in entities["users"]
    ]
    return seed
