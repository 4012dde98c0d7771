from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
from datetime import date
import datetime
from enum import Enum
import re

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

# --------------------------------------------------------------------------
# Enums for Staff Scheduling
# --------------------------------------------------------------------------

class PlannerStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

class LeaveType(str, Enum):
    SICK = "sick"
    ANNUAL = "annual"
    EMERGENCY = "emergency"
    MATERNITY = "maternity"
    PATERNITY = "paternity"
    PERSONAL = "personal"
    CASUAL = "casual"
    BEREAVEMENT = "bereavement"

class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LEAVE = "leave"
    WEEKOFF = "weekoff"


def leave_total_days(start_date: date, end_date: date) -> int:
    """Inclusive day count of a leave; both ends are taken."""
    return (end_date - start_date).days + 1


def _weekday_list(value: Optional[List[str]]) -> Optional[List[str]]:
    if value is None:
        return value
    days = [day.strip().lower() for day in value]
    invalid = [day for day in days if day not in WEEKDAYS]
    if invalid:
        raise ValueError(f"Invalid weekday(s): {', '.join(invalid)}")
    return days


def _not_null(value):
    # Optional on update means "may be omitted", not "may be cleared"
    if value is None:
        raise ValueError("cannot be null")
    return value

# --------------------------------------------------------------------------
# Rosters
# --------------------------------------------------------------------------

class RosterShift(BaseModel):
    shift_schedule_id: str = Field(..., min_length=1)
    employee_id: str = Field(..., min_length=1)
    status: AttendanceStatus = AttendanceStatus.PRESENT
    remarks: Optional[str] = Field(default=None, max_length=500)

class RosterCreate(BaseModel):
    facility_id: Optional[str] = None
    date: datetime.date
    shifts: List[RosterShift] = Field(default_factory=list)

class RosterUpdate(BaseModel):
    date: Optional[datetime.date] = None
    shifts: Optional[List[RosterShift]] = None

    @field_validator("date")
    @classmethod
    def reject_null(cls, value: Optional[datetime.date]) -> datetime.date:
        return _not_null(value)

# --------------------------------------------------------------------------
# Leave planner
# --------------------------------------------------------------------------

class LeavePlannerCreate(BaseModel):
    facility_id: Optional[str] = None
    employee_id: str = Field(..., min_length=1)
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str = Field(..., min_length=1, max_length=500)
    status: PlannerStatus = PlannerStatus.PENDING
    remarks: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def check_range(self):
        if self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self

class LeavePlannerUpdate(BaseModel):
    leave_type: Optional[LeaveType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = Field(default=None, min_length=1, max_length=500)
    status: Optional[PlannerStatus] = None
    remarks: Optional[str] = Field(default=None, max_length=500)

    @field_validator("start_date", "end_date")
    @classmethod
    def reject_null(cls, value: Optional[date]) -> date:
        return _not_null(value)

# --------------------------------------------------------------------------
# Shift schedules
# --------------------------------------------------------------------------

class ShiftScheduleCreate(BaseModel):
    facility_id: Optional[str] = None
    employee_id: str = Field(..., min_length=1)
    shift_name: str = Field(..., min_length=1, max_length=100)
    start_time: str  # HH:MM
    end_time: str    # HH:MM
    working_days: List[str] = Field(default_factory=list)
    break_duration: int = Field(default=60, ge=0)  # minutes
    roster_date: Optional[date] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM format")
        return value

    @field_validator("working_days")
    @classmethod
    def validate_days(cls, value: List[str]) -> List[str]:
        return _weekday_list(value)

class ShiftScheduleUpdate(BaseModel):
    employee_id: Optional[str] = Field(default=None, min_length=1)
    shift_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    working_days: Optional[List[str]] = None
    break_duration: Optional[int] = Field(default=None, ge=0)
    roster_date: Optional[date] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM format")
        return value

    @field_validator("working_days")
    @classmethod
    def validate_days(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _weekday_list(value)

# --------------------------------------------------------------------------
# Week-off planner
# --------------------------------------------------------------------------

class WeekoffPlannerCreate(BaseModel):
    facility_id: Optional[str] = None
    employee_id: str = Field(..., min_length=1)
    week_start_date: date
    week_end_date: date
    weekoff_days: List[str] = Field(..., min_length=1)
    reason: Optional[str] = Field(default=None, max_length=500)
    status: PlannerStatus = PlannerStatus.PENDING

    @field_validator("weekoff_days")
    @classmethod
    def validate_days(cls, value: List[str]) -> List[str]:
        return _weekday_list(value)

    @model_validator(mode="after")
    def check_range(self):
        if self.week_end_date < self.week_start_date:
            raise ValueError("Week end date cannot be before week start date")
        return self

class WeekoffPlannerUpdate(BaseModel):
    week_start_date: Optional[date] = None
    week_end_date: Optional[date] = None
    weekoff_days: Optional[List[str]] = None
    reason: Optional[str] = Field(default=None, max_length=500)
    status: Optional[PlannerStatus] = None

    @field_validator("week_start_date", "week_end_date")
    @classmethod
    def reject_null(cls, value: Optional[date]) -> date:
        return _not_null(value)

    @field_validator("weekoff_days")
    @classmethod
    def validate_days(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _weekday_list(value)
