"""
Service Catalog Service - default service catalogs per facility.

One ``CatalogService`` class drives both the regular and the IoT catalog;
the differences live in ``CatalogKind``. The catalog document id is the
facility id, so concurrent initializations serialize on one document and
exactly one catalog can exist for a facility.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple
from collections import defaultdict
import logging

from ..auth.access import ensure_access
from ..core.clock import utc_now
from ..core.errors import AppError, ConflictError, NotFoundError, ValidationError
from ..core.responses import paginate, sort_documents
from ..database.collections import COLLECTIONS
from ..database.database_service import database_service
from ..models.service_catalog import (
    CatalogKind,
    DEFAULT_IOT_SERVICES,
    DEFAULT_SERVICES,
    IoTServiceCategory,
    ServiceCatalog,
    ServiceCategory,
)

logger = logging.getLogger(__name__)

REGULAR_CATALOG = CatalogKind(
    label="Services",
    collection_key="service_management",
    categories=ServiceCategory,
    defaults=DEFAULT_SERVICES,
)

IOT_CATALOG = CatalogKind(
    label="IoT services",
    collection_key="iot_service_management",
    categories=IoTServiceCategory,
    defaults=DEFAULT_IOT_SERVICES,
    iot=True,
)


class CatalogService:
    def __init__(self, kind: CatalogKind):
        self.kind = kind
        self.db = database_service
        self.collection = COLLECTIONS[kind.collection_key]

    # ===== Initialization =====

    async def initialize(self, facility_id: str, facility_name: str, facility_type: str,
                         created_by: str, reuse_existing: bool = False) -> Tuple[Dict[str, Any], bool]:
        """
        Create the default catalog for a facility.

        Returns ``(catalog, created)``. When a live catalog already exists it
        is returned with ``created=False`` if ``reuse_existing`` is set,
        otherwise a ConflictError is raised.
        """
        now = utc_now()

        def _initialize(scope):
            existing = scope.get(self.collection, facility_id)
            if existing and not existing.get("is_deleted"):
                if reuse_existing:
                    return existing, False
                raise ConflictError(f"{self.kind.label} already initialized for this facility")

            catalog = ServiceCatalog.build_default(
                self.kind, facility_id, facility_name, facility_type, created_by, now
            )
            if existing:
                # Keep the soft-deleted predecessor instead of overwriting it
                archive_id = f"{facility_id}__archived__{int(now.timestamp())}"
                scope.set(self.collection, archive_id, existing)
            scope.set(self.collection, facility_id, catalog.document)
            return {**catalog.document, "id": facility_id}, True

        catalog, created = await self.db.run_transaction(_initialize)
        if created:
            logger.info(f"✅ Default {self.kind.label} initialized for facility {facility_id}")
        return catalog, created

    async def _get_facility(self, facility_id: str) -> Dict[str, Any]:
        success, facility, error = await self.db.get_document(COLLECTIONS['facilities'], facility_id)
        if not success:
            raise AppError(f"Failed to load facility: {error}")
        if not facility:
            raise NotFoundError("Facility not found")
        return facility

    async def initialize_for_facility(self, facility_id: str, actor: dict) -> Dict[str, Any]:
        facility = await self._get_facility(facility_id)
        ensure_access(actor, facility_id, "create")
        catalog, _ = await self.initialize(
            facility_id,
            facility.get("site_name", ""),
            facility.get("facility_type", ""),
            actor.get("id"),
            reuse_existing=False,
        )
        return catalog

    async def get_or_initialize(self, facility_id: str, actor: dict,
                                category: Optional[str] = None,
                                include_inactive: bool = True) -> Dict[str, Any]:
        """Return the facility's catalog, creating the default one on first access."""
        ensure_access(actor, facility_id, "read")

        success, document, error = await self.db.get_document(self.collection, facility_id)
        if not success:
            raise AppError(f"Failed to load {self.kind.label}: {error}")

        if not document or document.get("is_deleted"):
            facility = await self._get_facility(facility_id)
            document, created = await self.initialize(
                facility_id,
                facility.get("site_name", ""),
                facility.get("facility_type", ""),
                actor.get("id") or facility_id,
                reuse_existing=True,
            )
            if created:
                logger.info(f"{self.kind.label} auto-initialized on first read for facility {facility_id}")

        return ServiceCatalog(document, self.kind).filtered(category, include_inactive)

    # ===== Mutations =====

    async def _mutate(self, facility_id: str, actor: dict,
                      mutation: Callable[[ServiceCatalog, Any], None]) -> Dict[str, Any]:
        ensure_access(actor, facility_id, "update")
        now = utc_now()

        def _apply(scope):
            document = scope.get(self.collection, facility_id)
            if not document or document.get("is_deleted"):
                raise NotFoundError(f"{self.kind.label} not found for this facility")
            catalog = ServiceCatalog(document, self.kind)
            mutation(catalog, now)
            catalog.document["updated_by"] = actor.get("id")
            scope.set(self.collection, facility_id, catalog.document)
            return {**catalog.document, "id": facility_id}

        return await self.db.run_transaction(_apply)

    async def add_service(self, facility_id: str, data: Dict[str, Any], actor: dict) -> Dict[str, Any]:
        category = data.get("category")
        return await self._mutate(
            facility_id, actor,
            lambda catalog, now: catalog.add_service(category, data, now),
        )

    async def update_service_status(self, facility_id: str, category: str, service_name: str,
                                    is_active: bool, actor: dict) -> Dict[str, Any]:
        return await self._mutate(
            facility_id, actor,
            lambda catalog, now: catalog.set_service_status(category, service_name, is_active, now),
        )

    async def update_service_details(self, facility_id: str, data: Dict[str, Any], actor: dict) -> Dict[str, Any]:
        def _update(catalog, now):
            catalog.update_service_details(
                data["category"],
                data["old_service_name"],
                now,
                new_name=data.get("new_service_name"),
                description=data.get("description"),
                status=data.get("status"),
                features=data.get("features"),
                integration_endpoint=data.get("integration_endpoint"),
            )
        return await self._mutate(facility_id, actor, _update)

    async def remove_service(self, facility_id: str, category: str, service_name: str,
                             actor: dict) -> Dict[str, Any]:
        return await self._mutate(
            facility_id, actor,
            lambda catalog, now: catalog.remove_service(category, service_name, now),
        )

    async def bulk_update(self, facility_id: str, updates: List[Dict[str, Any]], actor: dict) -> Dict[str, Any]:
        if not updates:
            raise ValidationError("Please provide an array of services to update")

        def _bulk(catalog, now):
            for update in updates:
                catalog.validate_category(update["category"])
            for update in updates:
                try:
                    catalog.set_service_status(update["category"], update["service_name"],
                                               update["is_active"], now)
                except NotFoundError as e:
                    logger.warning(f"Skipping bulk update entry for facility {facility_id}: {e.message}")

        return await self._mutate(facility_id, actor, _bulk)

    async def delete(self, facility_id: str, actor: dict) -> Dict[str, Any]:
        def _soft_delete(catalog, now):
            catalog.document.update({
                "is_deleted": True,
                "deleted_at": now,
                "deleted_by": actor.get("id"),
                "last_updated": now,
            })
        return await self._mutate(facility_id, actor, _soft_delete)

    # ===== Reads =====

    async def _load(self, facility_id: str) -> ServiceCatalog:
        success, document, error = await self.db.get_document(self.collection, facility_id)
        if not success:
            raise AppError(f"Failed to load {self.kind.label}: {error}")
        if not document or document.get("is_deleted"):
            raise NotFoundError(f"{self.kind.label} not found for this facility")
        return ServiceCatalog(document, self.kind)

    async def statistics(self, facility_id: str, actor: dict) -> Dict[str, Any]:
        ensure_access(actor, facility_id, "read")
        catalog = await self._load(facility_id)
        return catalog.statistics()

    async def _live_catalogs(self, facility_type: Optional[str] = None) -> List[Dict[str, Any]]:
        filters = [("is_deleted", "==", False)]
        if facility_type:
            filters.append(("facility_type", "==", facility_type))
        success, documents, error = await self.db.query_documents(self.collection, filters)
        if not success:
            raise AppError(f"Failed to query {self.kind.label}: {error}")
        return documents

    async def list_catalogs(self, page: int = 1, limit: int = 10,
                            facility_type: Optional[str] = None) -> Dict[str, Any]:
        documents = sort_documents(await self._live_catalogs(facility_type), "created_at", descending=True)
        items, pagination = paginate(documents, page, limit)
        return {"catalogs": items, "pagination": pagination}

    async def global_statistics(self) -> Dict[str, Any]:
        documents = await self._live_catalogs()

        by_category: Dict[str, Dict[str, int]] = defaultdict(lambda: {"total_services": 0, "active_services": 0})
        by_type: Dict[str, Dict[str, int]] = defaultdict(lambda: {"facilities": 0, "active_services": 0})
        service_counts: Dict[Tuple[str, str], int] = defaultdict(int)

        for document in documents:
            facility_type = document.get("facility_type") or "unknown"
            by_type[facility_type]["facilities"] += 1
            by_type[facility_type]["active_services"] += document.get("total_services_active", 0)
            for cat in document.get("service_categories", []):
                by_category[cat.get("category")]["total_services"] += cat.get("total_count", 0)
                by_category[cat.get("category")]["active_services"] += cat.get("active_count", 0)
                for svc in cat.get("services", []):
                    if svc.get("is_active"):
                        service_counts[(cat.get("category"), svc.get("name"))] += 1

        most_active = sorted(service_counts.items(), key=lambda item: (-item[1], item[0]))[:10]

        stats = {
            "total_facilities": len(documents),
            "services_by_category": [
                {"category": category, **counts} for category, counts in sorted(by_category.items())
            ],
            "services_by_facility_type": [
                {"facility_type": facility_type, **counts} for facility_type, counts in sorted(by_type.items())
            ],
            "most_active_services": [
                {"category": category, "name": name, "active_facilities": count}
                for (category, name), count in most_active
            ],
        }
        if self.kind.iot:
            stats["iot_enabled_facilities"] = sum(1 for document in documents if document.get("iot_enabled"))
        return stats


service_catalog_service = CatalogService(REGULAR_CATALOG)
iot_catalog_service = CatalogService(IOT_CATALOG)
