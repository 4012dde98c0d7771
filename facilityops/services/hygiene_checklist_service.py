from typing import Any, Dict

from .scoped_resource_service import FacilityScopedService
from .hygiene_section_service import hygiene_section_service
from ..core.clock import utc_now
from ..core.errors import NotFoundError, ValidationError


class HygieneChecklistService(FacilityScopedService):
    """Uploaded checklist templates; only their file metadata is stored here."""

    collection_key = "hygiene_checklists"
    label = "Hygiene checklist"
    plural = "hygiene_checklists"
    search_fields = ["file_name"]
    sort_field = "upload_date"

    async def _ensure_section(self, section_id: str, facility_id: str) -> None:
        try:
            section = await hygiene_section_service.fetch(section_id)
        except NotFoundError:
            raise ValidationError("Invalid hygiene section")
        if section.get("facility_id") != facility_id:
            raise ValidationError("Hygiene section does not belong to this facility")

    async def prepare_create(self, data: Dict[str, Any], facility_id: str, actor: dict) -> Dict[str, Any]:
        await self._ensure_section(data["section_id"], facility_id)
        data["upload_date"] = utc_now()
        data["uploaded_by"] = actor.get("id")
        data.setdefault("is_active", True)
        return data

    async def prepare_update(self, existing: Dict[str, Any], changes: Dict[str, Any],
                             actor: dict) -> Dict[str, Any]:
        if changes.get("section_id") and changes["section_id"] != existing.get("section_id"):
            await self._ensure_section(changes["section_id"], existing["facility_id"])
        if changes.get("file_path") and changes["file_path"] != existing.get("file_path"):
            changes["upload_date"] = utc_now()
            changes["uploaded_by"] = actor.get("id")
        return changes


hygiene_checklist_service = HygieneChecklistService()
