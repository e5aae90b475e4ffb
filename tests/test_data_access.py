import pytest

from kig_issues.core.config import StorageMode
from kig_issues.core.exceptions import CorruptRecordError, DuplicateEmailError, StorageError
from kig_issues.services.data_access import DataAccessService
from kig_issues.services.entity_id_service import EntityIdService

NEW_ISSUE = {
    "title": "Blocked storm drain",
    "description": "Drain outside the library is blocked",
    "category": "drainage",
    "location": {"latitude": -34.04, "longitude": 23.05},
    "reported_by": "2",
}


class FailingDatabase:
    """Stands in for an unreachable cloud store."""

    async def create_document(self, collection, data, document_id):
        return False, None, "backend unavailable"

    async def get_document(self, collection, document_id):
        return False, None, "backend unavailable"

    async def set_document(self, collection, document_id, data):
        return False, "backend unavailable"

    async def query_documents(self, collection, filters=None, limit=None):
        return False, [], "backend unavailable"


@pytest.mark.asyncio
async def test_mock_mode_serves_fixtures(data_access):
    assert not data_access.is_live
    users = await data_access.get_users()
    issues = await data_access.get_issues()

    assert {u.email for u in users} == {"admin@kig.com", "leader@kig.com"}
    assert {i.id for i in issues} == {"1", "2"}


@pytest.mark.asyncio
async def test_created_issue_listed_exactly_once(data_access):
    created = await data_access.create_issue(NEW_ISSUE)
    issues = await data_access.get_issues()

    assert [i.id for i in issues].count(created.id) == 1
    assert created.id not in {"1", "2"}
    assert created.created_at == created.updated_at
    assert created.status.value == "open"


@pytest.mark.asyncio
async def test_created_ids_are_distinct(data_access):
    first = await data_access.create_issue(NEW_ISSUE)
    second = await data_access.create_issue(NEW_ISSUE)

    assert first.id != second.id
    assert int(second.id) > int(first.id)


def test_entity_ids_strictly_increase():
    ids = EntityIdService()
    generated = [int(ids.generate_id()) for _ in range(200)]
    assert generated == sorted(set(generated))


@pytest.mark.asyncio
async def test_get_user_by_email(data_access):
    user = await data_access.get_user_by_email("leader@kig.com")
    assert user.id == "2"
    assert await data_access.get_user_by_email("nobody@kig.com") is None


@pytest.mark.asyncio
async def test_duplicate_email_rejected(data_access):
    data = {"email": "sam@kig.com", "name": "Sam", "role": "resident"}
    await data_access.create_user(data)

    with pytest.raises(DuplicateEmailError):
        await data_access.create_user(dict(data, name="Other Sam"))

    matching = [u for u in await data_access.get_users() if u.email == "sam@kig.com"]
    assert len(matching) == 1


@pytest.mark.asyncio
async def test_seeded_email_is_reserved(data_access):
    with pytest.raises(DuplicateEmailError):
        await data_access.create_user({"email": "admin@kig.com", "name": "Impostor"})


@pytest.mark.asyncio
async def test_update_issue_merges_and_protects_fields(data_access):
    before = await data_access.get_issue_by_id("1")
    updated = await data_access.update_issue("1", {"priority": "critical", "reported_by": "99"})

    assert updated.priority.value == "critical"
    assert updated.reported_by == before.reported_by
    assert updated.created_at == before.created_at
    assert updated.updated_at >= before.updated_at
    assert (await data_access.get_issue_by_id("1")).priority.value == "critical"


@pytest.mark.asyncio
async def test_update_missing_issue_returns_none(data_access):
    assert await data_access.update_issue("does-not-exist", {"priority": "low"}) is None


@pytest.mark.asyncio
async def test_tasks_filtered_by_work_group(data_access):
    tasks = await data_access.get_tasks_by_work_group("1")
    assert [t.id for t in tasks] == ["1"]
    assert await data_access.get_tasks_by_work_group("404") == []


@pytest.mark.asyncio
async def test_activity_logs_newest_first(data_access):
    logs = await data_access.get_activity_logs()
    assert [log.id for log in logs] == ["1", "2", "3"]
    assert len(await data_access.get_activity_logs(limit=2)) == 2


@pytest.mark.asyncio
async def test_corrupt_stored_record_surfaces(data_access):
    collection = data_access._collection("issues")
    await data_access.db.set_document(collection, "bad", {
        "partitionKey": "Issue", "rowKey": "bad", "title": "x", "description": "y",
        "category": "water", "status": "open", "priority": "low",
        "location": "not-json", "reportedBy": "1",
    })

    with pytest.raises(CorruptRecordError):
        await data_access.get_issues()


@pytest.mark.asyncio
async def test_live_backend_failure_raises_instead_of_fixtures():
    data_access = DataAccessService(StorageMode.LIVE, db=FailingDatabase())

    assert data_access.is_live
    with pytest.raises(StorageError):
        await data_access.get_issues()
    with pytest.raises(StorageError):
        await data_access.get_user_by_id("1")
    with pytest.raises(StorageError):
        await data_access.create_issue(NEW_ISSUE)


@pytest.mark.asyncio
async def test_update_issue_rejects_null_required_field(data_access):
    with pytest.raises(ValueError):
        await data_access.update_issue("1", {"title": None})

    assert (await data_access.get_issue_by_id("1")).title == "Water pipe burst on Main Street"


@pytest.mark.asyncio
async def test_update_issue_can_clear_assignment(data_access):
    updated = await data_access.update_issue("2", {"assigned_to": None})
    assert updated.assigned_to is None
    assert (await data_access.get_issue_by_id("2")).assigned_to is None


@pytest.mark.asyncio
async def test_task_list_and_lookup(data_access):
    tasks = await data_access.get_tasks()
    assert {t.id for t in tasks} == {"1", "2"}

    task = await data_access.get_task_by_id("2")
    assert task.work_group_id == "2"
    assert await data_access.get_task_by_id("missing") is None


@pytest.mark.asyncio
async def test_activity_log_lookup(data_access):
    log = await data_access.get_activity_log_by_id("2")
    assert log.before_data == {"status": "open"}
    assert await data_access.get_activity_log_by_id("missing") is None

    created = await data_access.create_activity_log({
        "type": "messagePosted", "description": "Hello neighbours", "user_id": "1",
    })
    assert (await data_access.get_activity_log_by_id(created.id)).description == "Hello neighbours"
