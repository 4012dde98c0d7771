"""Staff scheduling routes: rosters, leave planner, shift schedules, week-offs."""

from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Dict, Any, Optional
import logging

from ..auth.dependencies import get_current_user
from ..core.errors import AppError
from ..core.responses import success_response
from ..models.staff_scheduling_models import (
    LeavePlannerCreate,
    LeavePlannerUpdate,
    LeaveType,
    PlannerStatus,
    RosterCreate,
    RosterUpdate,
    ShiftScheduleCreate,
    ShiftScheduleUpdate,
    WeekoffPlannerCreate,
    WeekoffPlannerUpdate,
)
from ..models.user import MANAGER_ROLES
from ..services.staff_scheduling_service import (
    leave_planner_service,
    roster_service,
    shift_schedule_service,
    weekoff_planner_service,
)
from .resource_routes import add_crud_routes

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/rosters", tags=["Rosters"])
leave_router = APIRouter(prefix="/api/leave-planners", tags=["Leave Planner"])
shift_router = APIRouter(prefix="/api/shift-schedules", tags=["Shift Schedules"])
weekoff_router = APIRouter(prefix="/api/weekoff-planners", tags=["Week-off Planner"])


def _enum_value(value):
    return value.value if value is not None else None


# ==================== ROSTERS ====================

@router.get("/", response_model=Dict[str, Any])
async def list_rosters(
    facility_id: Optional[str] = Query(None),
    date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        result = await roster_service.list(
            current_user, facility_id=facility_id,
            filters=roster_service.equality_filters(date=date), page=page, limit=limit,
        )
        return success_response(result)
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error listing rosters: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


# ==================== LEAVE PLANNER ====================

@leave_router.get("/", response_model=Dict[str, Any])
async def list_leaves(
    facility_id: Optional[str] = Query(None),
    employee_id: Optional[str] = Query(None),
    status: Optional[PlannerStatus] = Query(None),
    leave_type: Optional[LeaveType] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        result = await leave_planner_service.list(
            current_user,
            facility_id=facility_id,
            filters=leave_planner_service.equality_filters(
                employee_id=employee_id, status=_enum_value(status), leave_type=_enum_value(leave_type),
            ),
            page=page,
            limit=limit,
        )
        return success_response(result)
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error listing leaves: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@leave_router.get("/upcoming", response_model=Dict[str, Any])
async def upcoming_leaves(
    facility_id: Optional[str] = Query(None),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    """Approved leaves starting today or later, soonest first."""
    try:
        return success_response(await leave_planner_service.upcoming(current_user, facility_id))
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error listing upcoming leaves: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


# ==================== SHIFT SCHEDULES ====================

@shift_router.get("/", response_model=Dict[str, Any])
async def list_shift_schedules(
    facility_id: Optional[str] = Query(None),
    employee_id: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        result = await shift_schedule_service.list(
            current_user, facility_id=facility_id,
            filters=shift_schedule_service.equality_filters(employee_id=employee_id), page=page, limit=limit,
        )
        return success_response(result)
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error listing shift schedules: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


# ==================== WEEK-OFF PLANNER ====================

@weekoff_router.get("/", response_model=Dict[str, Any])
async def list_weekoffs(
    facility_id: Optional[str] = Query(None),
    employee_id: Optional[str] = Query(None),
    status: Optional[PlannerStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        result = await weekoff_planner_service.list(
            current_user,
            facility_id=facility_id,
            filters=weekoff_planner_service.equality_filters(employee_id=employee_id, status=_enum_value(status)),
            page=page,
            limit=limit,
        )
        return success_response(result)
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error listing week-offs: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


add_crud_routes(router, roster_service, RosterCreate, RosterUpdate, MANAGER_ROLES)
add_crud_routes(leave_router, leave_planner_service, LeavePlannerCreate, LeavePlannerUpdate, MANAGER_ROLES)
add_crud_routes(shift_router, shift_schedule_service, ShiftScheduleCreate, ShiftScheduleUpdate, MANAGER_ROLES)
add_crud_routes(weekoff_router, weekoff_planner_service, WeekoffPlannerCreate, WeekoffPlannerUpdate, MANAGER_ROLES)
