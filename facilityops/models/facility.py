from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

CONTACT_NO_PATTERN = r"^\+?[\d\s\-()]+$"


class FacilityCreate(BaseModel):
    # A client-supplied tenant_id is silently dropped; it is always generated
    model_config = ConfigDict(extra="ignore")

    site_name: str = Field(..., min_length=1, max_length=100)
    city: str = Field(..., min_length=1, max_length=50)
    location: str = Field(..., min_length=1, max_length=200)
    client_name: str = Field(..., min_length=1, max_length=100)
    position: str = Field(..., min_length=1, max_length=100)
    contact_no: str = Field(..., pattern=CONTACT_NO_PATTERN)
    email: Optional[EmailStr] = None
    facility_type: str = Field(..., min_length=1)  # residential, commercial, industrial, ...
    additional_info: Dict[str, Any] = Field(default_factory=dict)
    settings: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("site_name", "city", "location", "client_name", "position")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if v else None


class FacilityUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    site_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    city: Optional[str] = Field(default=None, min_length=1, max_length=50)
    location: Optional[str] = Field(default=None, min_length=1, max_length=200)
    client_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    position: Optional[str] = Field(default=None, min_length=1, max_length=100)
    contact_no: Optional[str] = Field(default=None, pattern=CONTACT_NO_PATTERN)
    email: Optional[EmailStr] = None
    facility_type: Optional[str] = Field(default=None, min_length=1)
    additional_info: Optional[Dict[str, Any]] = None
    settings: Optional[Dict[str, Any]] = None

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if v else v


class FacilityBulkCreate(BaseModel):
    # Entries are validated one by one so a bad row does not reject the batch
    facilities: List[Dict[str, Any]] = Field(..., min_length=1)
