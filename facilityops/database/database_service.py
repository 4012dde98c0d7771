"""
Database Service - thin tuple-returning wrapper around Firestore.

Every method reports failures as data instead of raising, so callers decide
which HTTP error a failed read or write becomes:

    success, doc_id, error = await database_service.create_document(...)
    success, doc, error    = await database_service.get_document(...)   # doc is None when missing
    success, docs, error   = await database_service.query_documents(...)
    success, error         = await database_service.update_document(...)
    success, error         = await database_service.delete_document(...)

Multi-document atomic work goes through ``run_transaction``.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from firebase_admin import firestore as admin_firestore
from google.cloud.firestore_v1 import FieldFilter

from .collections import COLLECTION_SCHEMAS
from .firestore_client import get_firestore_client

logger = logging.getLogger(__name__)

Filter = Tuple[str, str, Any]


def _payload(data: Dict[str, Any]) -> Dict[str, Any]:
    # The document id lives on the reference, never inside the stored body
    return {key: value for key, value in data.items() if key != 'id'}


def _with_id(snapshot) -> Dict[str, Any]:
    doc = snapshot.to_dict() or {}
    doc['id'] = snapshot.id
    return doc


def _apply_filters(query, filters: Optional[List[Filter]]):
    for field, op, value in filters or []:
        query = query.where(filter=FieldFilter(field, op, value))
    return query


class TransactionScope:
    """
    Document operations bound to one Firestore transaction.

    Firestore requires every read to happen before the first write, so
    callers read everything they need up front and only then write.
    """

    def __init__(self, client, transaction):
        self._client = client
        self._transaction = transaction

    def _ref(self, collection: str, document_id: str):
        return self._client.collection(collection).document(document_id)

    def new_id(self, collection: str) -> str:
        return self._client.collection(collection).document().id

    def get(self, collection: str, document_id: str) -> Optional[Dict[str, Any]]:
        snapshot = self._ref(collection, document_id).get(transaction=self._transaction)
        return _with_id(snapshot) if snapshot.exists else None

    def query(self, collection: str, filters: Optional[List[Filter]] = None) -> List[Dict[str, Any]]:
        query = _apply_filters(self._client.collection(collection), filters)
        return [_with_id(snapshot) for snapshot in query.get(transaction=self._transaction)]

    def set(self, collection: str, document_id: str, data: Dict[str, Any]) -> None:
        self._transaction.set(self._ref(collection, document_id), _payload(data))

    def update(self, collection: str, document_id: str, data: Dict[str, Any]) -> None:
        self._transaction.update(self._ref(collection, document_id), _payload(data))

    def delete(self, collection: str, document_id: str) -> None:
        self._transaction.delete(self._ref(collection, document_id))


class DatabaseService:
    def __init__(self):
        self._client = None

    @property
    def client(self):
        if self._client is None:
            self._client = get_firestore_client()
        return self._client

    def _missing_required(self, collection: str, data: Dict[str, Any]) -> List[str]:
        schema = COLLECTION_SCHEMAS.get(collection, {})
        return [field for field in schema.get('required', []) if data.get(field) in (None, '')]

    def new_id(self, collection: str) -> str:
        return self.client.collection(collection).document().id

    async def create_document(self, collection: str, data: Dict[str, Any],
                              document_id: Optional[str] = None,
                              validate: bool = True) -> Tuple[bool, Optional[str], Optional[str]]:
        try:
            if validate:
                missing = self._missing_required(collection, data)
                if missing:
                    return False, None, f"Missing required fields: {', '.join(missing)}"

            collection_ref = self.client.collection(collection)
            doc_ref = collection_ref.document(document_id) if document_id else collection_ref.document()
            doc_ref.set(_payload(data))
            return True, doc_ref.id, None
        except Exception as e:
            logger.error(f"Error creating document in {collection}: {e}")
            return False, None, str(e)

    async def get_document(self, collection: str,
                           document_id: str) -> Tuple[bool, Optional[Dict[str, Any]], Optional[str]]:
        try:
            snapshot = self.client.collection(collection).document(document_id).get()
            if not snapshot.exists:
                return True, None, None
            return True, _with_id(snapshot), None
        except Exception as e:
            logger.error(f"Error getting document {collection}/{document_id}: {e}")
            return False, None, str(e)

    async def query_documents(self, collection: str, filters: Optional[List[Filter]] = None,
                              limit: Optional[int] = None) -> Tuple[bool, List[Dict[str, Any]], Optional[str]]:
        try:
            query = _apply_filters(self.client.collection(collection), filters)
            if limit:
                query = query.limit(limit)
            return True, [_with_id(snapshot) for snapshot in query.stream()], None
        except Exception as e:
            logger.error(f"Error querying {collection} with {filters}: {e}")
            return False, [], str(e)

    async def update_document(self, collection: str, document_id: str,
                              data: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
        try:
            self.client.collection(collection).document(document_id).update(_payload(data))
            return True, None
        except Exception as e:
            logger.error(f"Error updating document {collection}/{document_id}: {e}")
            return False, str(e)

    async def delete_document(self, collection: str, document_id: str) -> Tuple[bool, Optional[str]]:
        try:
            self.client.collection(collection).document(document_id).delete()
            return True, None
        except Exception as e:
            logger.error(f"Error deleting document {collection}/{document_id}: {e}")
            return False, str(e)

    async def run_transaction(self, operation: Callable[[TransactionScope], Any]) -> Any:
        """
        Run ``operation(scope)`` inside a Firestore transaction and return its result.

        Firestore retries the operation on contention, so it must only touch
        the database through ``scope``. Anything it raises aborts the
        transaction and propagates to the caller with nothing committed.
        """
        client = self.client
        transaction = client.transaction()

        @admin_firestore.transactional
        def _run(txn):
            return operation(TransactionScope(client, txn))

        return _run(transaction)


database_service = DatabaseService()
