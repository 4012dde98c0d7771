"""
Quality readings for treatment plants and swimming pools.

STP and pool readings are flagged with ``within_normal_range`` against the
normal range stored on the reading itself, so a facility can tighten or
relax its own limits.
"""

from typing import Any, Dict, Optional
import logging

from .scoped_resource_service import FacilityScopedService
from ..core.errors import ValidationError
from ..models.quality import NORMAL_RANGES, SwitchState, check_ranges_ordered, readings_within_range
from ..models.water import SupplyStatus

logger = logging.getLogger(__name__)


class QualityReadingService(FacilityScopedService):
    plant: str = ""
    switch_field: Optional[str] = None
    defaults: Dict[str, Any] = {}

    def _apply_ranges(self, record: Dict[str, Any]) -> Optional[bool]:
        if self.plant not in NORMAL_RANGES:
            return None
        try:
            check_ranges_ordered(record, self.plant)
        except ValueError as e:
            raise ValidationError(str(e))
        return readings_within_range(record, self.plant)

    async def prepare_create(self, data: Dict[str, Any], facility_id: str, actor: dict) -> Dict[str, Any]:
        for field, value in self.defaults.items():
            data.setdefault(field, value)
        if self.switch_field:
            data.setdefault(self.switch_field, SwitchState.OFF.value)
        data.setdefault("status", SupplyStatus.ACTIVE.value)

        within = self._apply_ranges(data)
        if within is not None:
            data["within_normal_range"] = within
            if not within:
                logger.warning(f"{self.label} reading out of normal range in facility {facility_id}")
        return data

    async def prepare_update(self, existing: Dict[str, Any], changes: Dict[str, Any],
                             actor: dict) -> Dict[str, Any]:
        changes.pop("within_normal_range", None)
        within = self._apply_ranges({**existing, **changes})
        if within is not None:
            changes["within_normal_range"] = within
        return changes


class STPService(QualityReadingService):
    collection_key = "stp_readings"
    label = "STP reading"
    plural = "stp_readings"
    plant = "stp"
    switch_field = "backwash"
    defaults = {"mlss_normal_range_min": 2000, "mlss_normal_range_max": 4000, "backwash_water_flow": 0}


class WTPService(QualityReadingService):
    collection_key = "wtp_readings"
    label = "WTP reading"
    plural = "wtp_readings"
    plant = "wtp"
    switch_field = "regeneration"
    defaults = {"regen_water_flow": 0}


class SwimmingPoolService(QualityReadingService):
    collection_key = "swimming_pool_readings"
    label = "Swimming pool reading"
    plural = "swimming_pool_readings"
    plant = "swimming_pool"
    switch_field = "backwash"
    defaults = {
        "ph_normal_range_min": 7.2, "ph_normal_range_max": 7.6,
        "chlorine_normal_range_min": 1.0, "chlorine_normal_range_max": 3.0,
        "backwash_flow": 0,
    }


class ROPlantService(QualityReadingService):
    collection_key = "ro_plant_readings"
    label = "RO plant reading"
    plural = "ro_plant_readings"
    plant = "ro_plant"
    switch_field = "regeneration"
    defaults = {"regen_water_flow": 0}


stp_service = STPService()
wtp_service = WTPService()
swimming_pool_service = SwimmingPoolService()
ro_plant_service = ROPlantService()
