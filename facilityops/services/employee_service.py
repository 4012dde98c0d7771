"""
Employee Service - staff accounts created by facility managers.

Employees are ``users`` documents. A new employee always works in exactly
the facilities its creator manages, and admin-tier accounts are never
created, listed or edited through here.
"""

from typing import Any, Dict, List, Optional
import logging

from ..auth.access import ensure_access, is_privileged, managed_facilities
from ..auth.security import get_password_hash, verify_password
from ..core.clock import local_today, parse_date, utc_now
from ..core.errors import AppError, DuplicateError, ForbiddenError, NotFoundError, ValidationError
from ..core.responses import paginate, sort_documents
from ..database.collections import COLLECTIONS
from ..database.database_service import database_service
from ..models.user import (
    PRIVILEGED_ROLES,
    EmploymentStatus,
    UserRole,
    UserStatus,
    VerificationStatus,
    default_permissions,
    public_user,
)

logger = logging.getLogger(__name__)

# Never writable through the employee endpoints
LOCKED_FIELDS = {
    "id", "email", "managed_facilities", "password_hash", "permissions", "profile",
    "created_at", "created_by", "is_deleted", "deleted_at", "deleted_by",
}

ROLE_VALUES = [role.value for role in UserRole]
STATUS_VALUES = [status.value for status in UserStatus]


def employee_search_text(user: dict) -> str:
    profile = user.get("profile") or {}
    parts = [user.get("first_name"), user.get("last_name"), user.get("email"), profile.get("employee_id")]
    return " ".join(str(part) for part in parts if part).lower()


class EmployeeService:
    def __init__(self):
        self.db = database_service

    # ===== Visibility =====

    def _in_scope(self, employee: dict, actor: dict) -> bool:
        if employee.get("role") in PRIVILEGED_ROLES:
            return False
        if is_privileged(actor):
            return True
        return bool(set(employee.get("managed_facilities") or []) & set(managed_facilities(actor)))

    async def _load(self, employee_id: str, actor: dict, deleted: Optional[bool] = False) -> Dict[str, Any]:
        """Load an employee the actor may see; ``deleted=None`` accepts both states."""
        success, employee, error = await self.db.get_document(COLLECTIONS['users'], employee_id)
        if not success:
            raise AppError(f"Failed to load employee: {error}")
        if not employee or not self._in_scope(employee, actor):
            raise NotFoundError("Employee not found")
        if deleted is not None and bool(employee.get("is_deleted")) != deleted:
            raise NotFoundError("Deleted employee not found" if deleted else "Employee not found")
        return employee

    async def _query(self, filters: Optional[list] = None) -> List[Dict[str, Any]]:
        success, users, error = await self.db.query_documents(COLLECTIONS['users'], filters)
        if not success:
            raise AppError(f"Failed to list employees: {error}")
        return users

    @staticmethod
    def _check_assignable_role(role: Optional[str]) -> None:
        if role is None:
            return
        if role not in ROLE_VALUES:
            raise ValidationError(f"Invalid role. Must be one of: {', '.join(ROLE_VALUES)}")
        if role in PRIVILEGED_ROLES:
            raise ValidationError("Cannot assign admin or super admin role")

    async def _write(self, employee_id: str, changes: Dict[str, Any], actor: dict) -> None:
        changes["updated_at"] = utc_now()
        changes["updated_by"] = actor.get("id")
        success, error = await self.db.update_document(COLLECTIONS['users'], employee_id, changes)
        if not success:
            raise AppError(f"Failed to update employee: {error}")

    # ===== Create =====

    async def create(self, data: Dict[str, Any], actor: dict) -> Dict[str, Any]:
        role = data.get("role") or UserRole.USER.value
        if role in PRIVILEGED_ROLES:
            raise ForbiddenError("Cannot create admin or super admin users")

        email = data["email"].strip().lower()
        now = utc_now()
        employee_id = self.db.new_id(COLLECTIONS['users'])
        profile = dict(data.get("profile") or {})
        profile["employment_status"] = EmploymentStatus.ACTIVE.value

        employee = {
            "email": email,
            "password_hash": get_password_hash(data["password"]),
            "first_name": data["first_name"],
            "last_name": data.get("last_name") or "",
            "phone": data.get("phone"),
            "role": role,
            "status": UserStatus.ACTIVE.value,
            "verification_status": VerificationStatus.PENDING.value,
            "email_verified": False,
            # Inherited from the creator; a client-supplied list is ignored
            "managed_facilities": managed_facilities(actor),
            "permissions": default_permissions(role),
            "profile": profile,
            "created_by": actor.get("id"),
            "updated_by": actor.get("id"),
            "created_at": now,
            "updated_at": now,
            "is_deleted": False,
        }

        def _create(scope):
            if scope.get(COLLECTIONS['user_emails'], email):
                raise DuplicateError("Employee with this email already exists")
            scope.set(COLLECTIONS['users'], employee_id, employee)
            scope.set(COLLECTIONS['user_emails'], email, {"user_id": employee_id, "email": email, "created_at": now})

        await self.db.run_transaction(_create)
        logger.info(f"✅ Employee {email} ({role}) created by {actor.get('email')}")
        return public_user({**employee, "id": employee_id})

    # ===== Reads =====

    async def list_employees(self, actor: dict, role: Optional[str] = None, status: Optional[str] = None,
                             search: Optional[str] = None, include_deleted: bool = False,
                             page: int = 1, limit: int = 10) -> Dict[str, Any]:
        filters = []
        if role:
            filters.append(("role", "==", role))
        if status:
            filters.append(("status", "==", status))
        users = await self._query(filters)

        needle = (search or "").strip().lower()
        employees = [
            user for user in users
            if user.get("id") != actor.get("id")
            and self._in_scope(user, actor)
            and (include_deleted or not user.get("is_deleted"))
            and (not needle or needle in employee_search_text(user))
        ]
        employees = sort_documents(employees, "created_at", descending=True)
        items, pagination = paginate(employees, page, limit)
        return {"employees": [public_user(user) for user in items], "pagination": pagination}

    async def get(self, employee_id: str, actor: dict) -> Dict[str, Any]:
        return public_user(await self._load(employee_id, actor))

    async def by_role(self, role: str, actor: dict) -> List[Dict[str, Any]]:
        self._check_assignable_role(role)
        users = await self._query([("role", "==", role)])
        employees = [u for u in users if not u.get("is_deleted") and self._in_scope(u, actor)]
        return [public_user(user) for user in sort_documents(employees, "first_name")]

    async def by_facility(self, facility_id: str, actor: dict) -> List[Dict[str, Any]]:
        ensure_access(actor, facility_id, "read")
        users = await self._query([("managed_facilities", "array_contains", facility_id)])
        employees = [
            u for u in users
            if not u.get("is_deleted") and u.get("role") not in PRIVILEGED_ROLES and u.get("id") != actor.get("id")
        ]
        return [public_user(user) for user in sort_documents(employees, "first_name")]

    async def exit_details(self, employee_id: str, actor: dict) -> Dict[str, Any]:
        employee = await self._load(employee_id, actor, deleted=None)
        profile = employee.get("profile") or {}
        if profile.get("employment_status") != EmploymentStatus.TERMINATED.value:
            raise ValidationError("Employee has not exited")
        return {
            "employee_id": employee["id"],
            "name": f"{employee.get('first_name', '')} {employee.get('last_name', '')}".strip(),
            "email": employee.get("email"),
            "exit_date": profile.get("termination_date"),
            "last_working_day": profile.get("last_working_day"),
            "exit_reason": profile.get("exit_reason"),
            "deleted_at": employee.get("deleted_at"),
            "deleted_by": employee.get("deleted_by"),
        }

    # ===== Updates =====

    async def update(self, employee_id: str, data: Dict[str, Any], actor: dict) -> Dict[str, Any]:
        employee = await self._load(employee_id, actor)
        changes = {key: value for key, value in data.items() if key not in LOCKED_FIELDS}

        if changes.get("role"):
            self._check_assignable_role(changes["role"])
            changes["permissions"] = default_permissions(changes["role"])
        if data.get("profile"):
            profile = dict(employee.get("profile") or {})
            profile.update({key: value for key, value in data["profile"].items() if value is not None})
            changes["profile"] = profile

        new_email = (data.get("email") or "").strip().lower()
        if new_email and new_email != employee.get("email"):
            changes["email"] = new_email
            await self._move_email(employee, new_email, changes, actor)
        else:
            await self._write(employee_id, changes, actor)

        logger.info(f"Employee {employee_id} updated by {actor.get('email')}")
        return public_user({**employee, **changes})

    async def _move_email(self, employee: dict, new_email: str, changes: Dict[str, Any], actor: dict) -> None:
        changes["updated_at"] = utc_now()
        changes["updated_by"] = actor.get("id")
        old_email = employee.get("email")

        def _move(scope):
            if scope.get(COLLECTIONS['user_emails'], new_email):
                raise DuplicateError("Employee with this email already exists")
            if old_email:
                scope.delete(COLLECTIONS['user_emails'], old_email)
            scope.set(COLLECTIONS['user_emails'], new_email, {
                "user_id": employee["id"], "email": new_email, "created_at": changes["updated_at"],
            })
            scope.update(COLLECTIONS['users'], employee["id"], changes)

        await self.db.run_transaction(_move)

    async def update_status(self, employee_id: str, status: str, actor: dict) -> Dict[str, Any]:
        if status not in STATUS_VALUES:
            raise ValidationError(f"Invalid status. Must be one of: {', '.join(STATUS_VALUES)}")
        employee = await self._load(employee_id, actor)
        changes = {"status": status}
        await self._write(employee_id, changes, actor)
        return public_user({**employee, **changes})

    async def update_role(self, employee_id: str, role: str, actor: dict) -> Dict[str, Any]:
        self._check_assignable_role(role)
        employee = await self._load(employee_id, actor)
        changes = {"role": role, "permissions": default_permissions(role)}
        await self._write(employee_id, changes, actor)
        logger.info(f"Employee {employee_id} role changed {employee.get('role')} -> {role}")
        return public_user({**employee, **changes})

    # ===== Exit / restore =====

    async def delete(self, employee_id: str, exit_date: str, exit_reason: str, actor: dict) -> Dict[str, Any]:
        try:
            exit_day = parse_date(str(exit_date))
        except ValueError:
            raise ValidationError("Invalid exit date, expected YYYY-MM-DD")
        if exit_day > local_today():
            raise ValidationError("Exit date cannot be in the future")
        if not exit_reason or not exit_reason.strip():
            raise ValidationError("Exit reason is required")

        employee = await self._load(employee_id, actor)
        profile = dict(employee.get("profile") or {})
        profile.update({
            "employment_status": EmploymentStatus.TERMINATED.value,
            "termination_date": exit_day.isoformat(),
            "last_working_day": exit_day.isoformat(),
            "exit_reason": exit_reason.strip(),
        })
        changes = {
            "is_deleted": True,
            "deleted_at": utc_now(),
            "deleted_by": actor.get("id"),
            "status": UserStatus.INACTIVE.value,
            "profile": profile,
        }
        await self._write(employee_id, changes, actor)
        logger.info(f"Employee {employee_id} exited on {exit_day} by {actor.get('email')}")
        return public_user({**employee, **changes})

    async def restore(self, employee_id: str, actor: dict) -> Dict[str, Any]:
        employee = await self._load(employee_id, actor, deleted=True)
        profile = dict(employee.get("profile") or {})
        profile["employment_status"] = EmploymentStatus.ACTIVE.value
        changes = {
            "is_deleted": False,
            "deleted_at": None,
            "deleted_by": None,
            "status": UserStatus.ACTIVE.value,
            "profile": profile,
        }
        await self._write(employee_id, changes, actor)
        logger.info(f"Employee {employee_id} restored by {actor.get('email')}")
        return public_user({**employee, **changes})

    # ===== Self service =====

    async def change_password(self, actor: dict, current_password: str, new_password: str) -> None:
        success, user, error = await self.db.get_document(COLLECTIONS['users'], actor["id"])
        if not success:
            raise AppError(f"Failed to load user: {error}")
        if not user:
            raise NotFoundError("User not found")
        if not verify_password(current_password, user.get("password_hash")):
            raise ValidationError("Current password is incorrect")
        await self._write(actor["id"], {"password_hash": get_password_hash(new_password)}, actor)
        logger.info(f"Password changed for {user.get('email')}")


employee_service = EmployeeService()
