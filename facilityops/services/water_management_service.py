"""
Water sources of a facility: storage tanks, borewells, municipal (Cauvery)
supply and tanker deliveries.
"""

from typing import Any, Dict
import logging

from .scoped_resource_service import FacilityScopedService
from ..models.water import SupplyStatus, tanker_water_supplied

logger = logging.getLogger(__name__)


class WaterSourceService(FacilityScopedService):
    async def prepare_create(self, data: Dict[str, Any], facility_id: str, actor: dict) -> Dict[str, Any]:
        data.setdefault("status", SupplyStatus.ACTIVE.value)
        return data


class WaterTankService(WaterSourceService):
    collection_key = "water_tanks"
    label = "Water tank"
    plural = "water_tanks"
    search_fields = ["tank_name", "location"]


class BorewellService(WaterSourceService):
    collection_key = "borewells"
    label = "Borewell"
    plural = "borewells"
    search_fields = ["borewell_name", "location"]


class CauverySupplyService(WaterSourceService):
    collection_key = "cauvery_supplies"
    label = "Cauvery supply"
    plural = "cauvery_supplies"


class TankerService(WaterSourceService):
    collection_key = "tankers"
    label = "Tanker supply"
    plural = "tankers"

    async def prepare_create(self, data: Dict[str, Any], facility_id: str, actor: dict) -> Dict[str, Any]:
        data = await super().prepare_create(data, facility_id, actor)
        data["total_water_supplied"] = tanker_water_supplied(data["total_tankers"], data["tanker_capacity"])
        return data

    async def prepare_update(self, existing: Dict[str, Any], changes: Dict[str, Any],
                             actor: dict) -> Dict[str, Any]:
        # Derived; recomputed whenever either factor changes
        changes.pop("total_water_supplied", None)
        if "total_tankers" in changes or "tanker_capacity" in changes:
            merged = {**existing, **changes}
            changes["total_water_supplied"] = tanker_water_supplied(merged["total_tankers"],
                                                                    merged["tanker_capacity"])
        return changes


water_tank_service = WaterTankService()
borewell_service = BorewellService()
cauvery_supply_service = CauverySupplyService()
tanker_service = TankerService()
