"""
Plant and pool quality readings: sewage treatment (STP), water treatment
(WTP), reverse osmosis (RO) and swimming pools.

STP and pool readings carry a configurable normal range per measured value;
``NORMAL_RANGES`` names the value and its min/max fields for each.
"""

from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, Field, model_validator

from .water import SupplyStatus


class SwitchState(str, Enum):
    ON = "ON"
    OFF = "OFF"


NORMAL_RANGES: Dict[str, Dict[str, Tuple[str, str]]] = {
    "stp": {
        "mlss": ("mlss_normal_range_min", "mlss_normal_range_max"),
    },
    "swimming_pool": {
        "ph_level": ("ph_normal_range_min", "ph_normal_range_max"),
        "chlorine": ("chlorine_normal_range_min", "chlorine_normal_range_max"),
    },
}


def check_ranges_ordered(values: dict, plant: str) -> None:
    for field, (low, high) in NORMAL_RANGES.get(plant, {}).items():
        if values.get(low) is not None and values.get(high) is not None and values[low] > values[high]:
            raise ValueError(f"{field} normal range minimum cannot exceed its maximum")


def readings_within_range(values: dict, plant: str) -> bool:
    for field, (low, high) in NORMAL_RANGES[plant].items():
        reading = values.get(field)
        if reading is None:
            continue
        if not values[low] <= reading <= values[high]:
            return False
    return True


# ==================== STP ====================

class STPReadingCreate(BaseModel):
    facility_id: Optional[str] = None
    mlss: float = Field(..., ge=0)                       # mg/L
    mlss_normal_range_min: float = Field(default=2000, ge=0)
    mlss_normal_range_max: float = Field(default=4000, ge=0)
    backwash: SwitchState = SwitchState.OFF
    backwash_water_flow: float = Field(default=0, ge=0)  # KL
    status: SupplyStatus = SupplyStatus.ACTIVE

    @model_validator(mode="after")
    def check_range(self):
        check_ranges_ordered(self.__dict__, "stp")
        return self


class STPReadingUpdate(BaseModel):
    mlss: Optional[float] = Field(default=None, ge=0)
    mlss_normal_range_min: Optional[float] = Field(default=None, ge=0)
    mlss_normal_range_max: Optional[float] = Field(default=None, ge=0)
    backwash: Optional[SwitchState] = None
    backwash_water_flow: Optional[float] = Field(default=None, ge=0)
    status: Optional[SupplyStatus] = None


# ==================== WTP ====================

class WTPReadingCreate(BaseModel):
    facility_id: Optional[str] = None
    input_hardness: float = Field(..., ge=0)     # ppm
    output_hardness: float = Field(..., ge=0)    # ppm
    regeneration: SwitchState = SwitchState.OFF
    regen_water_flow: float = Field(default=0, ge=0)
    tds: float = Field(..., ge=0)                # ppm
    status: SupplyStatus = SupplyStatus.ACTIVE


class WTPReadingUpdate(BaseModel):
    input_hardness: Optional[float] = Field(default=None, ge=0)
    output_hardness: Optional[float] = Field(default=None, ge=0)
    regeneration: Optional[SwitchState] = None
    regen_water_flow: Optional[float] = Field(default=None, ge=0)
    tds: Optional[float] = Field(default=None, ge=0)
    status: Optional[SupplyStatus] = None


# ==================== SWIMMING POOL ====================

class SwimmingPoolReadingCreate(BaseModel):
    facility_id: Optional[str] = None
    ph_level: float = Field(..., ge=0, le=14)
    ph_normal_range_min: float = Field(default=7.2, ge=0, le=14)
    ph_normal_range_max: float = Field(default=7.6, ge=0, le=14)
    chlorine: float = Field(..., ge=0)           # ppm
    chlorine_normal_range_min: float = Field(default=1.0, ge=0)
    chlorine_normal_range_max: float = Field(default=3.0, ge=0)
    backwash: SwitchState = SwitchState.OFF
    backwash_flow: float = Field(default=0, ge=0)
    status: SupplyStatus = SupplyStatus.ACTIVE

    @model_validator(mode="after")
    def check_range(self):
        check_ranges_ordered(self.__dict__, "swimming_pool")
        return self


class SwimmingPoolReadingUpdate(BaseModel):
    ph_level: Optional[float] = Field(default=None, ge=0, le=14)
    ph_normal_range_min: Optional[float] = Field(default=None, ge=0, le=14)
    ph_normal_range_max: Optional[float] = Field(default=None, ge=0, le=14)
    chlorine: Optional[float] = Field(default=None, ge=0)
    chlorine_normal_range_min: Optional[float] = Field(default=None, ge=0)
    chlorine_normal_range_max: Optional[float] = Field(default=None, ge=0)
    backwash: Optional[SwitchState] = None
    backwash_flow: Optional[float] = Field(default=None, ge=0)
    status: Optional[SupplyStatus] = None


# ==================== RO PLANT ====================

class ROPlantReadingCreate(BaseModel):
    facility_id: Optional[str] = None
    input_tds: float = Field(..., ge=0)
    output_tds: float = Field(..., ge=0)
    regeneration: SwitchState = SwitchState.OFF
    regen_water_flow: float = Field(default=0, ge=0)
    usage_point_hardness: float = Field(..., ge=0)
    status: SupplyStatus = SupplyStatus.ACTIVE


class ROPlantReadingUpdate(BaseModel):
    input_tds: Optional[float] = Field(default=None, ge=0)
    output_tds: Optional[float] = Field(default=None, ge=0)
    regeneration: Optional[SwitchState] = None
    regen_water_flow: Optional[float] = Field(default=None, ge=0)
    usage_point_hardness: Optional[float] = Field(default=None, ge=0)
    status: Optional[SupplyStatus] = None
