"""
Document stores behind the data access layer.

Both stores expose the same async API and return `(success, data, error)`
tuples; `error` is a short string. A conditional insert that finds the key
taken fails with `ALREADY_EXISTS` so callers can tell it apart from backend
failures.
"""

import copy
import logging
from typing import Any, Dict, List, Optional, Tuple

from google.api_core.exceptions import AlreadyExists
from google.cloud.firestore_v1 import FieldFilter

from .firestore_client import get_firestore_client

logger = logging.getLogger(__name__)

ALREADY_EXISTS = "already_exists"

Filter = Tuple[str, str, Any]


class DatabaseService:
    """Firestore-backed store: one collection per partition, document id = row key."""

    def __init__(self, client=None):
        self.db = client or get_firestore_client()

    async def create_document(
        self, collection: str, data: Dict[str, Any], document_id: str
    ) -> Tuple[bool, Optional[str], Optional[str]]:
        """Insert only if the document does not exist yet."""
        try:
            self.db.collection(collection).document(document_id).create(data)
            return True, document_id, None
        except AlreadyExists:
            logger.warning(f"Document {collection}/{document_id} already exists")
            return False, None, ALREADY_EXISTS
        except Exception as e:
            logger.error(f"Error creating document {collection}/{document_id}: {e}")
            return False, None, str(e)

    async def get_document(
        self, collection: str, document_id: str
    ) -> Tuple[bool, Optional[Dict[str, Any]], Optional[str]]:
        try:
            snapshot = self.db.collection(collection).document(document_id).get()
            if not snapshot.exists:
                return True, None, None
            return True, snapshot.to_dict(), None
        except Exception as e:
            logger.error(f"Error fetching document {collection}/{document_id}: {e}")
            return False, None, str(e)

    async def set_document(
        self, collection: str, document_id: str, data: Dict[str, Any]
    ) -> Tuple[bool, Optional[str]]:
        """Replace the whole document (last write wins)."""
        try:
            self.db.collection(collection).document(document_id).set(data)
            return True, None
        except Exception as e:
            logger.error(f"Error replacing document {collection}/{document_id}: {e}")
            return False, str(e)

    async def query_documents(
        self, collection: str, filters: Optional[List[Filter]] = None, limit: Optional[int] = None
    ) -> Tuple[bool, List[Dict[str, Any]], Optional[str]]:
        try:
            query = self.db.collection(collection)
            for field, op, value in filters or []:
                query = query.where(filter=FieldFilter(field, op, value))
            if limit:
                query = query.limit(limit)
            return True, [doc.to_dict() for doc in query.stream()], None
        except Exception as e:
            logger.error(f"Error querying {collection}: {e}")
            return False, [], str(e)


class InMemoryDatabaseService:
    """
    Process-local store with the same API as DatabaseService.

    Records are deep-copied in and out so callers never share state with the
    store. There is no locking; this is for single-process development and tests.
    """

    _OPERATORS = {
        "==": lambda a, b: a == b,
        "!=": lambda a, b: a != b,
        "in": lambda a, b: a in b,
        "array_contains": lambda a, b: isinstance(a, list) and b in a,
    }

    def __init__(self, seed: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        for collection, records in (seed or {}).items():
            bucket = self._collections.setdefault(collection, {})
            for record in records:
                bucket[record["rowKey"]] = copy.deepcopy(record)

    async def create_document(
        self, collection: str, data: Dict[str, Any], document_id: str
    ) -> Tuple[bool, Optional[str], Optional[str]]:
        bucket = self._collections.setdefault(collection, {})
        if document_id in bucket:
            return False, None, ALREADY_EXISTS
        bucket[document_id] = copy.deepcopy(data)
        return True, document_id, None

    async def get_document(
        self, collection: str, document_id: str
    ) -> Tuple[bool, Optional[Dict[str, Any]], Optional[str]]:
        record = self._collections.get(collection, {}).get(document_id)
        return True, copy.deepcopy(record) if record is not None else None, None

    async def set_document(
        self, collection: str, document_id: str, data: Dict[str, Any]
    ) -> Tuple[bool, Optional[str]]:
        self._collections.setdefault(collection, {})[document_id] = copy.deepcopy(data)
        return True, None

    async def query_documents(
        self, collection: str, filters: Optional[List[Filter]] = None, limit: Optional[int] = None
    ) -> Tuple[bool, List[Dict[str, Any]], Optional[str]]:
        results = []
        for record in self._collections.get(collection, {}).values():
            if all(self._match(record, f) for f in filters or []):
                results.append(copy.deepcopy(record))
                if limit and len(results) >= limit:
                    break
        return True, results, None

    def _match(self, record: Dict[str, Any], flt: Filter) -> bool:
        field, op, value = flt
        try:
            compare = self._OPERATORS[op]
        except KeyError:
            raise ValueError(f"Unsupported filter operator: {op}")
        return compare(record.get(field), value)
