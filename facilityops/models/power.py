from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class MeterStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class PowerMeterCreate(BaseModel):
    facility_id: Optional[str] = None
    meter_id: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    connected_load: float = Field(..., ge=0)      # kW
    units: float = Field(..., ge=0)               # kWh
    power_factor: float = Field(..., ge=0, le=1)
    status: MeterStatus = MeterStatus.ACTIVE

    @field_validator("meter_id", "location")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("meter_id")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper()


class PowerMeterUpdate(BaseModel):
    meter_id: Optional[str] = Field(default=None, min_length=1)
    location: Optional[str] = Field(default=None, min_length=1)
    connected_load: Optional[float] = Field(default=None, ge=0)
    units: Optional[float] = Field(default=None, ge=0)
    power_factor: Optional[float] = Field(default=None, ge=0, le=1)
    status: Optional[MeterStatus] = None

    @field_validator("meter_id")
    @classmethod
    def _upper(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else v
