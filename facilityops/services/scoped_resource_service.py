"""
Base service for soft-deletable resources that belong to one facility.

Create, list, get, update and delete all go through the facility access
policy in ``auth.access``; subclasses only describe their collection and
add validation through ``prepare_create`` / ``prepare_update``.
"""

from typing import Any, Dict, List, Optional, Tuple
import logging

from ..auth.access import ensure_access, resolve_create_facility, scope_filter_batches
from ..core.clock import utc_now
from ..core.errors import AppError, NotFoundError
from ..core.responses import matches_search, paginate, sort_documents
from ..database.collections import COLLECTIONS
from ..database.database_service import database_service

logger = logging.getLogger(__name__)

# Fields a client can never set through create or update
PROTECTED_FIELDS = {
    "id", "facility_id", "created_at", "created_by", "updated_at", "updated_by",
    "is_deleted", "deleted_at", "deleted_by",
}


class FacilityScopedService:
    collection_key: str = ""
    label: str = "Resource"
    plural: str = "items"
    search_fields: List[str] = []
    sort_field: str = "created_at"
    sort_descending: bool = True

    def __init__(self):
        self.db = database_service

    @property
    def collection(self) -> str:
        return COLLECTIONS[self.collection_key]

    # ----- hooks -----

    async def prepare_create(self, data: Dict[str, Any], facility_id: str, actor: dict) -> Dict[str, Any]:
        return data

    async def prepare_update(self, existing: Dict[str, Any], changes: Dict[str, Any],
                             actor: dict) -> Dict[str, Any]:
        return changes

    # ----- helpers -----

    async def fetch(self, document_id: str) -> Dict[str, Any]:
        success, document, error = await self.db.get_document(self.collection, document_id)
        if not success:
            raise AppError(f"Failed to load {self.label.lower()}: {error}")
        if not document or document.get("is_deleted"):
            raise NotFoundError(f"{self.label} not found")
        return document

    async def query_scoped(self, actor: dict, facility_id: Optional[str] = None,
                           filters: Optional[List[Tuple[str, str, Any]]] = None) -> List[Dict[str, Any]]:
        documents: List[Dict[str, Any]] = []
        for scope in scope_filter_batches(actor, facility_id):
            query = scope + [("is_deleted", "==", False)] + list(filters or [])
            success, batch, error = await self.db.query_documents(self.collection, query)
            if not success:
                raise AppError(f"Failed to list {self.plural.replace('_', ' ')}: {error}")
            documents.extend(batch)
        return documents

    @staticmethod
    def equality_filters(**values: Any) -> List[Tuple[str, str, Any]]:
        return [(field, "==", value) for field, value in values.items() if value is not None]

    # ----- operations -----

    async def create(self, data: Dict[str, Any], actor: dict) -> Dict[str, Any]:
        facility_id = resolve_create_facility(actor, data.get("facility_id"))
        payload = {key: value for key, value in data.items() if key not in PROTECTED_FIELDS}
        payload = await self.prepare_create(payload, facility_id, actor)

        now = utc_now()
        record = {
            **payload,
            "facility_id": facility_id,
            "created_by": actor.get("id"),
            "updated_by": actor.get("id"),
            "created_at": now,
            "updated_at": now,
            "is_deleted": False,
        }
        success, document_id, error = await self.db.create_document(self.collection, record)
        if not success:
            raise AppError(f"Failed to create {self.label.lower()}: {error}")
        logger.info(f"{self.label} {document_id} created in facility {facility_id} by {actor.get('id')}")
        return {**record, "id": document_id}

    async def get(self, document_id: str, actor: dict) -> Dict[str, Any]:
        document = await self.fetch(document_id)
        ensure_access(actor, document.get("facility_id"), "read")
        return document

    async def list(self, actor: dict, facility_id: Optional[str] = None,
                   filters: Optional[List[Tuple[str, str, Any]]] = None,
                   search: Optional[str] = None, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        documents = await self.query_scoped(actor, facility_id, filters)
        if search:
            documents = [doc for doc in documents if matches_search(doc, search, self.search_fields)]
        documents = sort_documents(documents, self.sort_field, descending=self.sort_descending)
        items, pagination = paginate(documents, page, limit)
        return {self.plural: items, "pagination": pagination}

    async def update(self, document_id: str, data: Dict[str, Any], actor: dict) -> Dict[str, Any]:
        existing = await self.fetch(document_id)
        ensure_access(actor, existing.get("facility_id"), "update")

        changes = {key: value for key, value in data.items() if key not in PROTECTED_FIELDS}
        changes = await self.prepare_update(existing, changes, actor)
        changes["updated_at"] = utc_now()
        changes["updated_by"] = actor.get("id")

        success, error = await self.db.update_document(self.collection, document_id, changes)
        if not success:
            raise AppError(f"Failed to update {self.label.lower()}: {error}")
        return {**existing, **changes}

    async def delete(self, document_id: str, actor: dict) -> Dict[str, Any]:
        existing = await self.fetch(document_id)
        ensure_access(actor, existing.get("facility_id"), "delete")

        changes = {
            "is_deleted": True,
            "deleted_at": utc_now(),
            "deleted_by": actor.get("id"),
            "updated_by": actor.get("id"),
        }
        if "is_active" in existing:
            changes["is_active"] = False

        success, error = await self.db.update_document(self.collection, document_id, changes)
        if not success:
            raise AppError(f"Failed to delete {self.label.lower()}: {error}")
        logger.info(f"{self.label} {document_id} deleted by {actor.get('id')}")
        return {**existing, **changes}
