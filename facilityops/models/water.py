from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class SupplyStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class TankType(str, Enum):
    OVERHEAD = "overhead"
    UNDERGROUND = "underground"
    SURFACE = "surface"
    STORAGE = "storage"


def _not_blank(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


# Volumes are kilolitres throughout

class WaterTankCreate(BaseModel):
    facility_id: Optional[str] = None
    tank_name: str = Field(..., min_length=1, max_length=100)
    location: str = Field(..., min_length=1, max_length=200)
    capacity: float = Field(..., ge=0)
    type: TankType
    status: SupplyStatus = SupplyStatus.ACTIVE

    @field_validator("tank_name", "location")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return _not_blank(v)


class WaterTankUpdate(BaseModel):
    tank_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    location: Optional[str] = Field(default=None, min_length=1, max_length=200)
    capacity: Optional[float] = Field(default=None, ge=0)
    type: Optional[TankType] = None
    status: Optional[SupplyStatus] = None

    @field_validator("tank_name", "location")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return _not_blank(v)


class BorewellCreate(BaseModel):
    facility_id: Optional[str] = None
    borewell_name: str = Field(..., min_length=1, max_length=100)
    location: str = Field(..., min_length=1, max_length=200)
    depth: float = Field(..., ge=0)                 # metres
    water_supplied: float = Field(..., ge=0)
    status: SupplyStatus = SupplyStatus.ACTIVE

    @field_validator("borewell_name", "location")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return _not_blank(v)


class BorewellUpdate(BaseModel):
    borewell_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    location: Optional[str] = Field(default=None, min_length=1, max_length=200)
    depth: Optional[float] = Field(default=None, ge=0)
    water_supplied: Optional[float] = Field(default=None, ge=0)
    status: Optional[SupplyStatus] = None

    @field_validator("borewell_name", "location")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return _not_blank(v)


class CauverySupplyCreate(BaseModel):
    """Municipal (Cauvery) water supplied to the facility."""
    facility_id: Optional[str] = None
    water_supplied: float = Field(..., ge=0)
    status: SupplyStatus = SupplyStatus.ACTIVE


class CauverySupplyUpdate(BaseModel):
    water_supplied: Optional[float] = Field(default=None, ge=0)
    status: Optional[SupplyStatus] = None


class TankerCreate(BaseModel):
    facility_id: Optional[str] = None
    total_tankers: int = Field(..., ge=0)
    tanker_capacity: float = Field(..., ge=0)
    status: SupplyStatus = SupplyStatus.ACTIVE


class TankerUpdate(BaseModel):
    total_tankers: Optional[int] = Field(default=None, ge=0)
    tanker_capacity: Optional[float] = Field(default=None, ge=0)
    status: Optional[SupplyStatus] = None


def tanker_water_supplied(total_tankers: int, tanker_capacity: float) -> float:
    return total_tankers * tanker_capacity
