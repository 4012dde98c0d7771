from datetime import date
import re
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from .facility import CONTACT_NO_PATTERN


class ProviderCategory(str, Enum):
    SOFT_SERVICES      = "Soft Services"
    TECHNICAL_SERVICES = "Technical Services"
    AMCS               = "AMCs"
    STATUTORY          = "Statutory"
    SECURITY           = "Security"
    ATTENDANCE         = "Attendance"


class ContractStatus(str, Enum):
    ACTIVE  = "Active"
    PENDING = "Pending"
    EXPIRED = "Expired"


def _valid_phone(value: Optional[str]) -> Optional[str]:
    if value is not None and not re.match(CONTACT_NO_PATTERN, value):
        raise ValueError("Please provide a valid phone number")
    return value


class ServiceProviderBase(BaseModel):
    category: Optional[ProviderCategory] = None
    contact_person: Optional[str] = Field(default=None, min_length=2, max_length=100)
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    contract_status: Optional[ContractStatus] = None
    contract_start_date: Optional[date] = None
    contract_end_date: Optional[date] = None
    services: Optional[List[str]] = None
    description: Optional[str] = Field(default=None, max_length=500)
    address: Optional[str] = Field(default=None, max_length=200)
    rating: Optional[float] = Field(default=None, ge=0, le=5)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value):
        return _valid_phone(value)

    @field_validator("email")
    @classmethod
    def lower_email(cls, value):
        return value.lower() if value else value


class ServiceProviderCreate(ServiceProviderBase):
    facility_id: Optional[str] = None
    provider_name: str = Field(..., min_length=2, max_length=100)
    category: ProviderCategory
    contact_person: str = Field(..., min_length=2, max_length=100)
    phone: str
    email: EmailStr
    contract_status: ContractStatus = ContractStatus.PENDING

    @model_validator(mode="after")
    def check_contract_window(self):
        if (self.contract_start_date and self.contract_end_date
                and self.contract_start_date >= self.contract_end_date):
            raise ValueError("Contract end date must be after start date")
        return self


class ServiceProviderUpdate(ServiceProviderBase):
    provider_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    total_contracts: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class ServiceProviderBulkItem(ServiceProviderUpdate):
    provider_id: str = Field(..., min_length=1)


class ServiceProviderBulkUpdate(BaseModel):
    # Emptiness is reported by the service so it gets the usual 400 message
    providers: List[ServiceProviderBulkItem]
