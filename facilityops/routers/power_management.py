from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Dict, Any, Optional
import logging

from ..auth.dependencies import get_current_user
from ..core.errors import AppError
from ..core.responses import success_response
from ..models.power import MeterStatus, PowerMeterCreate, PowerMeterUpdate
from ..models.user import MANAGER_ROLES
from ..services.power_management_service import power_management_service
from .resource_routes import add_crud_routes

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/power-management",
    tags=["Power Management"],
    responses={404: {"description": "Not found"}}
)


@router.get("/", response_model=Dict[str, Any])
async def list_power_meters(
    facility_id: Optional[str] = Query(None),
    status: Optional[MeterStatus] = Query(None),
    search: Optional[str] = Query(None, description="Search meter id or location"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        result = await power_management_service.list(
            current_user,
            facility_id=facility_id,
            filters=power_management_service.equality_filters(status=status.value if status else None),
            search=search,
            page=page,
            limit=limit,
        )
        return success_response(result)
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error listing power meters: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


add_crud_routes(router, power_management_service, PowerMeterCreate, PowerMeterUpdate, MANAGER_ROLES)
