from fastapi import APIRouter, HTTPException, Depends, Query, Path
from typing import Dict, Any, Optional
import logging

from ..auth.dependencies import require_role
from ..core.errors import AppError
from ..core.responses import success_response
from ..models.user import (
    MANAGER_ROLES,
    EmployeeCreate,
    EmployeeExit,
    EmployeeRoleUpdate,
    EmployeeStatusUpdate,
    EmployeeUpdate,
)
from ..services.employee_service import employee_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/employees",
    tags=["Employees"],
    responses={404: {"description": "Not found"}}
)


@router.post("/", response_model=Dict[str, Any], status_code=201)
async def create_employee(
    payload: EmployeeCreate,
    current_user: Dict[str, Any] = Depends(require_role(MANAGER_ROLES))
):
    """Create an employee working in the creator's managed facilities."""
    try:
        employee = await employee_service.create(payload.model_dump(mode="json"), current_user)
        return success_response(employee, "Employee created successfully")
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error creating employee: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/", response_model=Dict[str, Any])
async def list_employees(
    role: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Search name, email or employee id"),
    include_deleted: bool = Query(False),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: Dict[str, Any] = Depends(require_role(MANAGER_ROLES))
):
    try:
        result = await employee_service.list_employees(
            current_user, role=role, status=status, search=search,
            include_deleted=include_deleted, page=page, limit=limit,
        )
        return success_response(result)
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error listing employees: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/role/{role}", response_model=Dict[str, Any])
async def get_employees_by_role(
    role: str = Path(...),
    current_user: Dict[str, Any] = Depends(require_role(MANAGER_ROLES))
):
    try:
        employees = await employee_service.by_role(role, current_user)
        return success_response({"employees": employees, "count": len(employees)})
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error listing employees by role {role}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/facility/{facility_id}", response_model=Dict[str, Any])
async def get_employees_by_facility(
    facility_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(require_role(MANAGER_ROLES))
):
    try:
        employees = await employee_service.by_facility(facility_id, current_user)
        return success_response({"employees": employees, "count": len(employees)})
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error listing employees of facility {facility_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{employee_id}", response_model=Dict[str, Any])
async def get_employee(
    employee_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(require_role(MANAGER_ROLES))
):
    try:
        return success_response(await employee_service.get(employee_id, current_user))
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error getting employee {employee_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/{employee_id}", response_model=Dict[str, Any])
async def update_employee(
    payload: EmployeeUpdate,
    employee_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(require_role(MANAGER_ROLES))
):
    try:
        employee = await employee_service.update(
            employee_id, payload.model_dump(mode="json", exclude_unset=True), current_user
        )
        return success_response(employee, "Employee updated successfully")
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error updating employee {employee_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/{employee_id}", response_model=Dict[str, Any])
async def delete_employee(
    payload: EmployeeExit,
    employee_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(require_role(MANAGER_ROLES))
):
    """Record an employee exit; the account is soft-deleted and deactivated."""
    try:
        employee = await employee_service.delete(
            employee_id, payload.exit_date.isoformat(), payload.exit_reason, current_user
        )
        return success_response(employee, "Employee deleted successfully")
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error deleting employee {employee_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/{employee_id}/restore", response_model=Dict[str, Any])
async def restore_employee(
    employee_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(require_role(MANAGER_ROLES))
):
    try:
        employee = await employee_service.restore(employee_id, current_user)
        return success_response(employee, "Employee restored successfully")
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error restoring employee {employee_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/{employee_id}/status", response_model=Dict[str, Any])
async def update_employee_status(
    payload: EmployeeStatusUpdate,
    employee_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(require_role(MANAGER_ROLES))
):
    try:
        employee = await employee_service.update_status(employee_id, payload.status.value, current_user)
        return success_response(employee, "Employee status updated successfully")
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error updating status of employee {employee_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/{employee_id}/role", response_model=Dict[str, Any])
async def update_employee_role(
    payload: EmployeeRoleUpdate,
    employee_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(require_role(MANAGER_ROLES))
):
    try:
        employee = await employee_service.update_role(employee_id, payload.role.value, current_user)
        return success_response(employee, "Employee role updated successfully")
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error updating role of employee {employee_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{employee_id}/exit-details", response_model=Dict[str, Any])
async def get_exit_details(
    employee_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(require_role(MANAGER_ROLES))
):
    try:
        return success_response(await employee_service.exit_details(employee_id, current_user))
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error getting exit details of employee {employee_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
