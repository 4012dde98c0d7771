from typing import Any, Dict, Optional
import logging

from .scoped_resource_service import FacilityScopedService
from ..core.errors import AppError, DuplicateError

logger = logging.getLogger(__name__)


class PowerManagementService(FacilityScopedService):
    """Electricity meters with their load, consumption and power factor."""

    collection_key = "power_management"
    label = "Power meter"
    plural = "power_meters"
    search_fields = ["meter_id", "location"]

    async def _ensure_meter_free(self, facility_id: str, meter_id: str, exclude_id: Optional[str] = None):
        success, documents, error = await self.db.query_documents(self.collection, [
            ("facility_id", "==", facility_id),
            ("meter_id", "==", meter_id),
            ("is_deleted", "==", False),
        ])
        if not success:
            raise AppError(f"Failed to check meter id: {error}")
        if any(doc["id"] != exclude_id for doc in documents):
            raise DuplicateError("Meter ID already exists for this facility")

    async def prepare_create(self, data: Dict[str, Any], facility_id: str, actor: dict) -> Dict[str, Any]:
        data["meter_id"] = data["meter_id"].strip().upper()
        await self._ensure_meter_free(facility_id, data["meter_id"])
        data.setdefault("status", "active")
        return data

    async def prepare_update(self, existing: Dict[str, Any], changes: Dict[str, Any],
                             actor: dict) -> Dict[str, Any]:
        if changes.get("meter_id"):
            changes["meter_id"] = changes["meter_id"].strip().upper()
            if changes["meter_id"] != existing.get("meter_id"):
                await self._ensure_meter_free(existing["facility_id"], changes["meter_id"], exclude_id=existing["id"])
        return changes


power_management_service = PowerManagementService()
