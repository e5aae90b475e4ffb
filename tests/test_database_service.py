import pytest
from google.api_core.exceptions import AlreadyExists

from kig_issues.core.config import StorageMode
from kig_issues.core.exceptions import DuplicateEmailError
from kig_issues.database.database_service import ALREADY_EXISTS, DatabaseService
from kig_issues.services.data_access import DataAccessService


class FakeSnapshot:
    def __init__(self, data):
        self._data = data
        self.exists = data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeDocument:
    def __init__(self, store, doc_id):
        self.store = store
        self.id = doc_id

    def create(self, data):
        if self.id in self.store:
            raise AlreadyExists(f"Document already exists: {self.id}")
        self.store[self.id] = dict(data)

    def set(self, data):
        self.store[self.id] = dict(data)

    def get(self):
        return FakeSnapshot(self.store.get(self.id))


class FakeQuery:
    def __init__(self, store, filters=(), limit_to=None):
        self.store = store
        self.filters = list(filters)
        self.limit_to = limit_to

    def where(self, filter=None):
        return FakeQuery(self.store, self.filters + [filter], self.limit_to)

    def limit(self, count):
        return FakeQuery(self.store, self.filters, count)

    def stream(self):
        matched = []
        for data in self.store.values():
            if all(self._match(data, f) for f in self.filters):
                matched.append(FakeSnapshot(data))
        return iter(matched[:self.limit_to] if self.limit_to else matched)

    @staticmethod
    def _match(data, flt):
        assert flt.op_string == "=="
        return data.get(flt.field_path) == flt.value


class FakeCollection(FakeQuery):
    def document(self, doc_id):
        return FakeDocument(self.store, doc_id)


class FakeFirestore:
    def __init__(self, fail=False):
        self.fail = fail
        self.collections = {}
        self.queried = []

    def collection(self, name):
        if self.fail:
            raise RuntimeError("503 Service Unavailable")
        self.queried.append(name)
        return FakeCollection(self.collections.setdefault(name, {}))


@pytest.fixture
def firestore():
    return FakeFirestore()


@pytest.fixture
def db(firestore):
    return DatabaseService(client=firestore)


@pytest.mark.asyncio
async def test_create_is_conditional(db, firestore):
    record = {"rowKey": "1", "title": "Pothole"}

    assert await db.create_document("Issue", record, "1") == (True, "1", None)
    assert await db.create_document("Issue", dict(record, title="Other"), "1") == (False, None, ALREADY_EXISTS)
    assert firestore.collections["Issue"]["1"]["title"] == "Pothole"


@pytest.mark.asyncio
async def test_missing_document_is_not_an_error(db):
    assert await db.get_document("Issue", "missing") == (True, None, None)


@pytest.mark.asyncio
async def test_set_replaces_document(db):
    await db.create_document("Issue", {"title": "Pothole", "status": "open"}, "1")
    assert await db.set_document("Issue", "1", {"title": "Pothole"}) == (True, None)

    success, record, error = await db.get_document("Issue", "1")
    assert success and error is None
    assert record == {"title": "Pothole"}


@pytest.mark.asyncio
async def test_query_applies_field_filters_and_limit(db):
    for row, group in [("1", "a"), ("2", "b"), ("3", "a"), ("4", "a")]:
        await db.create_document("Task", {"rowKey": row, "workGroupId": group}, row)

    success, records, error = await db.query_documents("Task", [("workGroupId", "==", "a")])
    assert success and error is None
    assert [r["rowKey"] for r in records] == ["1", "3", "4"]

    _, limited, _ = await db.query_documents("Task", [("workGroupId", "==", "a")], limit=2)
    assert len(limited) == 2

    _, everything, _ = await db.query_documents("Task")
    assert len(everything) == 4


@pytest.mark.asyncio
async def test_backend_failures_are_reported_not_raised():
    db = DatabaseService(client=FakeFirestore(fail=True))

    success, _, error = await db.create_document("Issue", {}, "1")
    assert not success and error != ALREADY_EXISTS
    assert (await db.get_document("Issue", "1"))[0] is False
    assert (await db.set_document("Issue", "1", {}))[0] is False
    assert await db.query_documents("Issue") == (False, [], "503 Service Unavailable")


@pytest.mark.asyncio
async def test_live_registration_claims_email_once(firestore):
    data_access = DataAccessService(StorageMode.LIVE, db=DatabaseService(client=firestore), collection_prefix="")
    user = await data_access.create_user({"email": "sam@kig.com", "name": "Sam"})

    with pytest.raises(DuplicateEmailError):
        await data_access.create_user({"email": "sam@kig.com", "name": "Other Sam"})

    assert firestore.collections["UserEmail"]["sam@kig.com"]["userId"] == user.id
    assert list(firestore.collections["User"]) == [user.id]
    assert (await data_access.get_user_by_email("sam@kig.com")).id == user.id
