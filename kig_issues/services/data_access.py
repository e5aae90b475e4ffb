"""
Entity store adapter.

Uniform list/get/create (and issue update) over the five entity kinds. The
backing store is fixed at construction by an explicit StorageMode: LIVE talks
to Firestore, MOCK to an in-memory store seeded with fixtures. Both go through
the same record codec so callers cannot tell them apart. Backend failures
raise StorageError; nothing falls back to fixture data.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..core.config import StorageMode, settings
from ..core.exceptions import DocumentExistsError, DuplicateEmailError, StorageError
from ..database.collections import PARTITIONS, collection_name
from ..database.database_service import ALREADY_EXISTS, DatabaseService, InMemoryDatabaseService
from ..database.fixtures import build_seed
from ..database.record_codec import DECODERS, ENCODERS
from ..models.database_models import ActivityLog, Issue, Task, User, WorkGroup
from .entity_id_service import entity_id_service

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DataAccessService:
    def __init__(self, mode: StorageMode, db=None, collection_prefix: Optional[str] = None):
        self.mode = StorageMode(mode)
        self.prefix = settings.COLLECTION_PREFIX if collection_prefix is None else collection_prefix
        if db is not None:
            self.db = db
        elif self.mode is StorageMode.LIVE:
            self.db = DatabaseService()
        else:
            self.db = InMemoryDatabaseService(build_seed(self.prefix))
        logger.info(f"Data access ready in {self.mode.value.upper()} mode")

    @property
    def is_live(self) -> bool:
        return self.mode is StorageMode.LIVE

    # ===== Generic record plumbing =====

    def _collection(self, kind: str) -> str:
        return collection_name(kind, self.prefix)

    async def _list(self, kind: str, filters=None, limit: Optional[int] = None) -> List[Any]:
        success, records, error = await self.db.query_documents(self._collection(kind), filters, limit)
        if not success:
            logger.error(f"Error fetching {kind}: {error}")
            raise StorageError(f"Failed to list {kind}")
        decode = DECODERS[kind]
        return [decode(record) for record in records]

    async def _get(self, kind: str, entity_id: str) -> Optional[Any]:
        success, record, error = await self.db.get_document(self._collection(kind), entity_id)
        if not success:
            logger.error(f"Error fetching {kind}/{entity_id}: {error}")
            raise StorageError(f"Failed to fetch {kind}")
        if record is None:
            return None
        return DECODERS[kind](record)

    async def _insert(self, kind: str, record: Dict[str, Any]) -> None:
        success, _, error = await self.db.create_document(self._collection(kind), record, record["rowKey"])
        if success:
            return
        if error == ALREADY_EXISTS:
            raise DocumentExistsError(f"{PARTITIONS[kind]}/{record['rowKey']} already exists")
        logger.error(f"Error creating {kind}/{record['rowKey']}: {error}")
        raise StorageError(f"Failed to create {kind}")

    async def _create(self, kind: str, model, data: Dict[str, Any]) -> Any:
        now = _utcnow()
        fields = dict(data)
        fields.update(id=entity_id_service.generate_id(), created_at=now)
        if "updated_at" in model.model_fields:
            fields["updated_at"] = now
        entity = model(**fields)
        await self._insert(kind, ENCODERS[kind](entity))
        return entity

    # ===== Users =====

    async def get_users(self) -> List[User]:
        return await self._list("users")

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        return await self._get("users", user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        users = await self._list("users", [("email", "==", email)], limit=1)
        return users[0] if users else None

    async def create_user(self, data: Dict[str, Any]) -> User:
        """
        Create a user, claiming the email first with a conditional insert on
        the email index so two registrations cannot both win.
        """
        email = data["email"]
        user_id = entity_id_service.generate_id()
        now = _utcnow()
        index_record = {
            "partitionKey": PARTITIONS["user_emails"],
            "rowKey": email,
            "userId": user_id,
            "createdAt": now.isoformat(),
        }
        try:
            await self._insert("user_emails", index_record)
        except DocumentExistsError:
            raise DuplicateEmailError(email)

        user = User(**{**data, "id": user_id, "created_at": now, "updated_at": now})
        await self._insert("users", ENCODERS["users"](user))
        return user

    # ===== Issues =====

    async def get_issues(self) -> List[Issue]:
        return await self._list("issues")

    async def get_issue_by_id(self, issue_id: str) -> Optional[Issue]:
        return await self._get("issues", issue_id)

    async def create_issue(self, data: Dict[str, Any]) -> Issue:
        return await self._create("issues", Issue, data)

    async def update_issue(self, issue_id: str, updates: Dict[str, Any]) -> Optional[Issue]:
        """Merge `updates` into the stored issue and replace the record."""
        existing = await self.get_issue_by_id(issue_id)
        if existing is None:
            return None

        protected = {"id", "created_at", "updated_at", "reported_by"}
        merged = existing.model_dump()
        merged.update({k: v for k, v in updates.items() if k not in protected})
        merged["updated_at"] = _utcnow()
        try:
            updated = Issue(**merged)
        except ValidationError as e:
            bad = e.errors()[0]
            field = ".".join(str(p) for p in bad.get("loc", ())) or "issue"
            raise ValueError(f"{field}: {bad.get('msg', 'invalid value')}") from e

        success, error = await self.db.set_document(
            self._collection("issues"), issue_id, ENCODERS["issues"](updated)
        )
        if not success:
            logger.error(f"Error updating issue {issue_id}: {error}")
            raise StorageError("Failed to update issue")
        return updated

    # ===== Work groups =====

    async def get_work_groups(self) -> List[WorkGroup]:
        return await self._list("work_groups")

    async def get_work_group_by_id(self, work_group_id: str) -> Optional[WorkGroup]:
        return await self._get("work_groups", work_group_id)

    async def create_work_group(self, data: Dict[str, Any]) -> WorkGroup:
        return await self._create("work_groups", WorkGroup, data)

    # ===== Tasks =====

    async def get_tasks(self) -> List[Task]:
        return await self._list("tasks")

    async def get_task_by_id(self, task_id: str) -> Optional[Task]:
        return await self._get("tasks", task_id)

    async def get_tasks_by_work_group(self, work_group_id: str) -> List[Task]:
        return await self._list("tasks", [("workGroupId", "==", work_group_id)])

    async def create_task(self, data: Dict[str, Any]) -> Task:
        return await self._create("tasks", Task, data)

    # ===== Activity logs =====

    async def get_activity_logs(self, limit: Optional[int] = None) -> List[ActivityLog]:
        logs = await self._list("activity")
        logs.sort(key=lambda log: log.created_at, reverse=True)
        return logs[:limit] if limit else logs

    async def get_activity_log_by_id(self, log_id: str) -> Optional[ActivityLog]:
        return await self._get("activity", log_id)

    async def create_activity_log(self, data: Dict[str, Any]) -> ActivityLog:
        return await self._create("activity", ActivityLog, data)
