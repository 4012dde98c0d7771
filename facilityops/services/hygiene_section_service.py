from typing import Any, Dict

from .scoped_resource_service import FacilityScopedService


class HygieneSectionService(FacilityScopedService):
    collection_key = "hygiene_sections"
    label = "Hygiene section"
    plural = "hygiene_sections"
    search_fields = ["section_name", "description"]
    sort_field = "section_name"
    sort_descending = False

    async def prepare_create(self, data: Dict[str, Any], facility_id: str, actor: dict) -> Dict[str, Any]:
        data.setdefault("is_active", True)
        return data


hygiene_section_service = HygieneSectionService()
