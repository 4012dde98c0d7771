from typing import Any, Dict
import logging
import uuid

from .scoped_resource_service import FacilityScopedService
from ..auth.access import ensure_access
from ..core.errors import AppError, DuplicateError, NotFoundError

logger = logging.getLogger(__name__)


def generate_qr_code(facility_id: str, floor_number: int) -> str:
    """QR payload printed on a floor: FL_{facility}_{floor}_{8 upper-case hex chars}."""
    return f"FL_{facility_id}_{floor_number}_{uuid.uuid4().hex[:8].upper()}"


class FloorLocationService(FacilityScopedService):
    collection_key = "floor_locations"
    label = "Floor location"
    plural = "floor_locations"
    search_fields = ["floor_name", "description"]
    sort_field = "floor_number"
    sort_descending = False

    async def _ensure_floor_free(self, facility_id: str, floor_number: int, exclude_id: str = None) -> None:
        success, documents, error = await self.db.query_documents(self.collection, [
            ("facility_id", "==", facility_id),
            ("floor_number", "==", floor_number),
            ("is_deleted", "==", False),
        ])
        if not success:
            raise AppError(f"Failed to check floor number: {error}")
        if any(doc["id"] != exclude_id for doc in documents):
            raise DuplicateError("Floor number already exists for this facility")

    async def prepare_create(self, data: Dict[str, Any], facility_id: str, actor: dict) -> Dict[str, Any]:
        await self._ensure_floor_free(facility_id, data["floor_number"])
        data["qr_code"] = generate_qr_code(facility_id, data["floor_number"])
        data.setdefault("is_active", True)
        return data

    async def prepare_update(self, existing: Dict[str, Any], changes: Dict[str, Any],
                             actor: dict) -> Dict[str, Any]:
        # The printed QR code stays valid for the lifetime of the location
        changes.pop("qr_code", None)
        new_floor = changes.get("floor_number")
        if new_floor is not None and new_floor != existing.get("floor_number"):
            await self._ensure_floor_free(existing["facility_id"], new_floor, exclude_id=existing["id"])
        return changes

    async def find_active_by_qr(self, qr_code: str) -> Dict[str, Any]:
        success, documents, error = await self.db.query_documents(self.collection, [
            ("qr_code", "==", qr_code),
            ("is_active", "==", True),
            ("is_deleted", "==", False),
        ], limit=1)
        if not success:
            raise AppError(f"Failed to resolve QR code: {error}")
        if not documents:
            raise NotFoundError("Invalid QR code or floor location not found")
        return documents[0]

    async def get_by_qr(self, qr_code: str, actor: dict) -> Dict[str, Any]:
        location = await self.find_active_by_qr(qr_code)
        ensure_access(actor, location["facility_id"], "read")
        return location


floor_location_service = FloorLocationService()
