from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

# --------------------------------------------------------------------------
# Enums
# --------------------------------------------------------------------------

class ChecklistStatus(str, Enum):
    PENDING     = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED   = "COMPLETED"
    VERIFIED    = "VERIFIED"


class Department(str, Enum):
    HOUSEKEEPING = "HOUSEKEEPING"
    GARDENING    = "GARDENING"
    PEST_CONTROL = "PEST_CONTROL"


class HygieneChecklistType(str, Enum):
    DAILY   = "daily"
    WEEKLY  = "weekly"
    MONTHLY = "monthly"


def derive_overall_status(items: List[Dict[str, Any]], verified: bool = False) -> ChecklistStatus:
    """
    Overall status of a daily checklist, computed only from its items.

    A checklist with no items counts as PENDING; it can never reach
    COMPLETED, so it can never be verified either.
    """
    completed = sum(1 for item in items if item.get("is_completed"))
    if completed == 0:
        return ChecklistStatus.PENDING
    if completed < len(items):
        return ChecklistStatus.IN_PROGRESS
    return ChecklistStatus.VERIFIED if verified else ChecklistStatus.COMPLETED


# --------------------------------------------------------------------------
# Hygiene sections & checklist templates
# --------------------------------------------------------------------------

class HygieneSectionCreate(BaseModel):
    facility_id: Optional[str] = None
    section_name: str = Field(..., min_length=1, max_length=100)  # Housekeeping, Gardening, Pest Control, ...
    description: Optional[str] = Field(default=None, max_length=500)
    is_active: bool = True


class HygieneSectionUpdate(BaseModel):
    section_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    is_active: Optional[bool] = None


class HygieneChecklistCreate(BaseModel):
    """Metadata for an uploaded checklist template; the file itself lives in storage."""
    facility_id: Optional[str] = None
    section_id: str = Field(..., min_length=1)
    checklist_type: HygieneChecklistType
    file_name: str = Field(..., min_length=1, max_length=255)
    file_path: str = Field(..., min_length=1)
    file_size: int = Field(default=0, ge=0)  # bytes
    is_active: bool = True


class HygieneChecklistUpdate(BaseModel):
    section_id: Optional[str] = Field(default=None, min_length=1)
    checklist_type: Optional[HygieneChecklistType] = None
    file_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    file_path: Optional[str] = Field(default=None, min_length=1)
    file_size: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


# --------------------------------------------------------------------------
# Floor locations
# --------------------------------------------------------------------------

class FloorLocationCreate(BaseModel):
    facility_id: Optional[str] = None
    floor_name: str = Field(..., min_length=1, max_length=100)  # Ground Floor, Floor 1, ...
    floor_number: int = Field(..., ge=0)
    description: Optional[str] = Field(default=None, max_length=500)
    is_active: bool = True


class FloorLocationUpdate(BaseModel):
    floor_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    floor_number: Optional[int] = Field(default=None, ge=0)
    description: Optional[str] = Field(default=None, max_length=500)
    is_active: Optional[bool] = None


# --------------------------------------------------------------------------
# Daily checklists
# --------------------------------------------------------------------------

class ChecklistItemCreate(BaseModel):
    item_name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=500)


class DailyChecklistCreate(BaseModel):
    facility_id: Optional[str] = None
    hygiene_section_id: str = Field(..., min_length=1)
    floor_location_id: str = Field(..., min_length=1)
    checklist_date: date
    checklist_items: List[ChecklistItemCreate] = Field(..., min_length=1)
    assigned_department: Department


class ChecklistItemComplete(BaseModel):
    notes: Optional[str] = Field(default=None, max_length=1000)
