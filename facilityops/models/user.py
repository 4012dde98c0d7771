from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

# ──────────────────────────────────────────────────────────────────────────────
# Enums
# ──────────────────────────────────────────────────────────────────────────────

class UserRole(str, Enum):
    SUPER_ADMIN      = "super_admin"
    ADMIN            = "admin"
    FACILITY_MANAGER = "facility_manager"
    SUPERVISOR       = "supervisor"
    TECHNICIAN       = "technician"
    HOUSEKEEPING     = "housekeeping"
    USER             = "user"
    GUEST            = "guest"


class UserStatus(str, Enum):
    ACTIVE    = "active"
    INACTIVE  = "inactive"
    SUSPENDED = "suspended"
    PENDING   = "pending"
    BLOCKED   = "blocked"


class VerificationStatus(str, Enum):
    PENDING  = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class EmploymentStatus(str, Enum):
    ACTIVE     = "active"
    TERMINATED = "terminated"


PRIVILEGED_ROLES = {UserRole.SUPER_ADMIN.value, UserRole.ADMIN.value}
ADMIN_ROLES = [UserRole.SUPER_ADMIN.value, UserRole.ADMIN.value]
MANAGER_ROLES = ADMIN_ROLES + [UserRole.FACILITY_MANAGER.value]
VERIFIER_ROLES = MANAGER_ROLES + [UserRole.SUPERVISOR.value]


# ──────────────────────────────────────────────────────────────────────────────
# Permissions
# ──────────────────────────────────────────────────────────────────────────────

PERMISSION_KEYS = [
    "can_manage_users",
    "can_manage_facilities",
    "can_manage_services",
    "can_manage_iot",
    "can_view_reports",
    "can_manage_settings",
    "can_manage_billing",
    "can_access_audit_logs",
    "can_manage_employees",
    "can_view_employee_reports",
    "can_approve_leaves",
    "can_manage_attendance",
    "can_manage_shifts",
    "can_manage_payroll",
    "can_view_salary_info",
    "can_manage_documents",
]

_ROLE_GRANTS: Dict[str, List[str]] = {
    UserRole.SUPER_ADMIN.value: PERMISSION_KEYS,
    UserRole.ADMIN.value: PERMISSION_KEYS,
    UserRole.FACILITY_MANAGER.value: [
        "can_manage_facilities", "can_manage_services", "can_manage_iot", "can_view_reports",
        "can_manage_employees", "can_view_employee_reports", "can_approve_leaves",
        "can_manage_attendance", "can_manage_shifts", "can_manage_documents",
    ],
    UserRole.SUPERVISOR.value: [
        "can_manage_services", "can_manage_iot", "can_view_reports",
        "can_view_employee_reports", "can_manage_attendance", "can_manage_shifts",
    ],
    UserRole.TECHNICIAN.value: ["can_manage_iot", "can_view_reports"],
    UserRole.HOUSEKEEPING.value: ["can_view_reports"],
    UserRole.USER.value: ["can_view_reports"],
}

# Bundle given to the manager account provisioned during facility onboarding:
# facility, service and IoT management only.
ONBOARDING_MANAGER_GRANTS = [
    "can_manage_facilities", "can_manage_services", "can_manage_iot", "can_view_reports",
]


def build_permissions(grants: List[str]) -> Dict[str, object]:
    permissions: Dict[str, object] = {key: key in grants for key in PERMISSION_KEYS}
    permissions["custom_permissions"] = []
    return permissions


def default_permissions(role: str) -> Dict[str, object]:
    permissions = build_permissions(_ROLE_GRANTS.get(role, []))
    if role == UserRole.SUPER_ADMIN.value:
        permissions["custom_permissions"] = ["all"]
    return permissions


def public_user(user: Optional[dict]) -> Optional[dict]:
    """Strip credential material before a user document leaves the API."""
    if user is None:
        return None
    return {key: value for key, value in user.items() if key != "password_hash"}


# ──────────────────────────────────────────────────────────────────────────────
# Employee payloads
# ──────────────────────────────────────────────────────────────────────────────

class EmployeeProfile(BaseModel):
    employee_id: Optional[str] = None
    department: Optional[str] = None
    job_title: Optional[str] = None
    work_location: Optional[str] = None


class EmployeeCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(default="", max_length=50)
    phone: Optional[str] = None
    role: UserRole = UserRole.USER
    profile: Optional[EmployeeProfile] = None
    # Accepted for compatibility but never trusted; the creator's set is used
    managed_facilities: Optional[List[str]] = None

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.strip().lower()


class EmployeeUpdate(BaseModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(default=None, max_length=50)
    phone: Optional[str] = None
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None
    profile: Optional[EmployeeProfile] = None

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if v else v


class EmployeeExit(BaseModel):
    exit_date: date
    exit_reason: str = Field(..., min_length=1, max_length=500)

    @field_validator("exit_reason")
    @classmethod
    def _strip_reason(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Exit reason is required")
        return v


class EmployeeStatusUpdate(BaseModel):
    status: UserStatus


class EmployeeRoleUpdate(BaseModel):
    role: UserRole


class PasswordChange(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)
