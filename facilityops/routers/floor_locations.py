from fastapi import APIRouter, HTTPException, Depends, Query, Path
from typing import Dict, Any, Optional
import logging

from ..auth.dependencies import get_current_user
from ..core.errors import AppError
from ..core.responses import success_response
from ..models.hygiene import FloorLocationCreate, FloorLocationUpdate
from ..models.user import MANAGER_ROLES
from ..services.floor_location_service import floor_location_service
from .resource_routes import add_crud_routes

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/floor-locations",
    tags=["Floor Locations"],
    responses={404: {"description": "Not found"}}
)


@router.get("/", response_model=Dict[str, Any])
async def list_floor_locations(
    facility_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Search floor name or description"),
    is_active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        result = await floor_location_service.list(
            current_user,
            facility_id=facility_id,
            filters=floor_location_service.equality_filters(is_active=is_active),
            search=search,
            page=page,
            limit=limit,
        )
        return success_response(result)
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error listing floor locations: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/qr/{qr_code}", response_model=Dict[str, Any])
async def get_floor_location_by_qr(
    qr_code: str = Path(..., description="QR code printed on the floor"),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        return success_response(await floor_location_service.get_by_qr(qr_code, current_user))
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error resolving floor QR code {qr_code}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


add_crud_routes(router, floor_location_service, FloorLocationCreate, FloorLocationUpdate, MANAGER_ROLES)
