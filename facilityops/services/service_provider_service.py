"""
Service Provider Service - outside vendors a facility contracts with.

A provider name is unique per facility and category (case-insensitive);
the lower-cased name is stored alongside so Firestore can do the equality
lookup.
"""

from typing import Any, Dict, List, Optional
from collections import Counter
import logging

from .scoped_resource_service import FacilityScopedService
from ..auth.access import ensure_access
from ..core.clock import parse_date
from ..core.errors import AppError, ConflictError, NotFoundError, ValidationError
from ..core.responses import matches_search, sort_documents
from ..database.collections import COLLECTIONS
from ..models.service_provider import ContractStatus, ProviderCategory

logger = logging.getLogger(__name__)

CATEGORY_VALUES = [category.value for category in ProviderCategory]
CONTRACT_STATUS_VALUES = [status.value for status in ContractStatus]


def check_contract_window(record: Dict[str, Any]) -> None:
    start, end = record.get("contract_start_date"), record.get("contract_end_date")
    if start and end and parse_date(str(start)) >= parse_date(str(end)):
        raise ValidationError("Contract end date must be after start date")


class ServiceProviderService(FacilityScopedService):
    collection_key = "service_providers"
    label = "Service provider"
    plural = "service_providers"
    search_fields = ["provider_name", "contact_person", "description", "services"]

    @staticmethod
    def _validate_enums(record: Dict[str, Any]) -> None:
        if record.get("category") is not None and record["category"] not in CATEGORY_VALUES:
            raise ValidationError(f"Invalid category. Must be one of: {', '.join(CATEGORY_VALUES)}")
        if record.get("contract_status") is not None and record["contract_status"] not in CONTRACT_STATUS_VALUES:
            raise ValidationError(
                f"Invalid contract status. Must be one of: {', '.join(CONTRACT_STATUS_VALUES)}"
            )

    async def _ensure_facility(self, facility_id: str) -> None:
        success, facility, error = await self.db.get_document(COLLECTIONS['facilities'], facility_id)
        if not success:
            raise AppError(f"Failed to load facility: {error}")
        if not facility:
            raise NotFoundError("Facility not found")

    async def _ensure_name_free(self, facility_id: str, name_lower: str, category: str,
                                exclude_id: Optional[str] = None) -> None:
        success, documents, error = await self.db.query_documents(self.collection, [
            ("facility_id", "==", facility_id),
            ("provider_name_lower", "==", name_lower),
            ("category", "==", category),
            ("is_deleted", "==", False),
        ])
        if not success:
            raise AppError(f"Failed to check provider name: {error}")
        if any(doc["id"] != exclude_id for doc in documents):
            raise ConflictError("Service provider with this name already exists in this category")

    async def prepare_create(self, data: Dict[str, Any], facility_id: str, actor: dict) -> Dict[str, Any]:
        await self._ensure_facility(facility_id)
        self._validate_enums(data)
        check_contract_window(data)

        data["provider_name"] = data["provider_name"].strip()
        data["provider_name_lower"] = data["provider_name"].lower()
        await self._ensure_name_free(facility_id, data["provider_name_lower"], data["category"])

        data.setdefault("contract_status", ContractStatus.PENDING.value)
        data.setdefault("services", [])
        if data.get("rating") is None:
            data["rating"] = 0
        data.setdefault("total_contracts", 0)
        data.setdefault("is_active", True)
        return data

    async def prepare_update(self, existing: Dict[str, Any], changes: Dict[str, Any],
                             actor: dict) -> Dict[str, Any]:
        self._validate_enums(changes)
        if changes.get("provider_name"):
            changes["provider_name"] = changes["provider_name"].strip()
            changes["provider_name_lower"] = changes["provider_name"].lower()

        merged = {**existing, **changes}
        check_contract_window(merged)
        if "provider_name_lower" in changes or "category" in changes:
            name_lower = merged.get("provider_name_lower") or merged.get("provider_name", "").lower()
            await self._ensure_name_free(existing["facility_id"], name_lower, merged["category"],
                                         exclude_id=existing["id"])
        return changes

    # ----- queries -----

    async def list_providers(self, actor: dict, facility_id: Optional[str] = None,
                             category: Optional[str] = None, contract_status: Optional[str] = None,
                             is_active: Optional[bool] = None, search: Optional[str] = None,
                             page: int = 1, limit: int = 10) -> Dict[str, Any]:
        self._validate_enums({"category": category, "contract_status": contract_status})
        filters = self.equality_filters(category=category, contract_status=contract_status, is_active=is_active)
        return await self.list(actor, facility_id=facility_id, filters=filters, search=search,
                               page=page, limit=limit)

    async def _facility_providers(self, facility_id: str, actor: dict,
                                  filters: Optional[list] = None) -> List[Dict[str, Any]]:
        ensure_access(actor, facility_id, "read")
        return await self.query_scoped(actor, facility_id, filters)

    async def by_category(self, facility_id: str, category: str, actor: dict) -> List[Dict[str, Any]]:
        if category not in CATEGORY_VALUES:
            raise ValidationError(f"Invalid category. Must be one of: {', '.join(CATEGORY_VALUES)}")
        providers = await self._facility_providers(facility_id, actor, [("category", "==", category)])
        return sort_documents(providers, "provider_name")

    async def active(self, facility_id: str, actor: dict) -> List[Dict[str, Any]]:
        providers = await self._facility_providers(facility_id, actor, [("is_active", "==", True)])
        providers = [p for p in providers if p.get("contract_status") != ContractStatus.EXPIRED.value]
        return sort_documents(providers, "provider_name")

    async def search(self, facility_id: str, query: Optional[str], actor: dict,
                     category: Optional[str] = None, contract_status: Optional[str] = None,
                     limit: int = 10) -> List[Dict[str, Any]]:
        if not query or not query.strip():
            raise ValidationError("Search query is required")
        self._validate_enums({"category": category, "contract_status": contract_status})
        filters = self.equality_filters(category=category, contract_status=contract_status)
        providers = await self._facility_providers(facility_id, actor, filters)
        matches = [p for p in providers if matches_search(p, query, self.search_fields)]
        return sort_documents(matches, "provider_name")[:max(1, min(limit, 50))]

    async def statistics(self, facility_id: str, actor: dict) -> Dict[str, Any]:
        providers = await self._facility_providers(facility_id, actor)
        active = sum(1 for p in providers if p.get("is_active"))
        ratings = [p["rating"] for p in providers if (p.get("rating") or 0) > 0]

        return {
            "total_providers": len(providers),
            "active_providers": active,
            "inactive_providers": len(providers) - active,
            "by_category": dict(Counter(p.get("category") for p in providers)),
            "by_contract_status": dict(Counter(p.get("contract_status") for p in providers)),
            "average_rating": round(sum(ratings) / len(ratings), 2) if ratings else 0,
        }

    # ----- batch -----

    async def bulk_update(self, facility_id: str, items: List[Dict[str, Any]], actor: dict) -> Dict[str, Any]:
        if not items:
            raise ValidationError("Please provide an array of providers to update")
        ensure_access(actor, facility_id, "update")

        results = []
        for item in items:
            provider_id = item.get("provider_id")
            changes = {key: value for key, value in item.items() if key != "provider_id"}
            try:
                existing = await self.fetch(provider_id)
                if existing.get("facility_id") != facility_id:
                    raise NotFoundError("Service provider not found in this facility")
                updated = await self.update(provider_id, changes, actor)
                results.append({"provider_id": provider_id, "success": True, "data": updated})
            except AppError as e:
                logger.warning(f"Bulk update of provider {provider_id} failed: {e.message}")
                results.append({"provider_id": provider_id, "success": False, "error": e.message})

        updated_count = sum(1 for result in results if result["success"])
        return {"updated": updated_count, "failed": len(results) - updated_count, "results": results}


service_provider_service = ServiceProviderService()
