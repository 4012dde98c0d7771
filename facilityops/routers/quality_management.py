"""Quality management routes: STP, WTP, swimming pool and RO plant readings."""

from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Dict, Any, Optional
import logging

from ..auth.dependencies import get_current_user
from ..core.errors import AppError
from ..core.responses import success_response
from ..models.quality import (
    ROPlantReadingCreate,
    ROPlantReadingUpdate,
    STPReadingCreate,
    STPReadingUpdate,
    SwimmingPoolReadingCreate,
    SwimmingPoolReadingUpdate,
    WTPReadingCreate,
    WTPReadingUpdate,
)
from ..models.user import MANAGER_ROLES
from ..models.water import SupplyStatus
from ..services.quality_management_service import (
    QualityReadingService,
    ro_plant_service,
    stp_service,
    swimming_pool_service,
    wtp_service,
)
from .resource_routes import add_crud_routes, add_list_route

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/quality-management/stp", tags=["Quality Management"])
wtp_router = APIRouter(prefix="/api/quality-management/wtp", tags=["Quality Management"])
pool_router = APIRouter(prefix="/api/quality-management/swimming-pools", tags=["Quality Management"])
ro_router = APIRouter(prefix="/api/quality-management/ro-plants", tags=["Quality Management"])


async def _list_ranged_readings(service: QualityReadingService, current_user: Dict[str, Any],
                                facility_id: Optional[str], status: Optional[SupplyStatus],
                                within_normal_range: Optional[bool], page: int, limit: int):
    try:
        result = await service.list(
            current_user,
            facility_id=facility_id,
            filters=service.equality_filters(
                status=status.value if status else None,
                within_normal_range=within_normal_range,
            ),
            page=page,
            limit=limit,
        )
        return success_response(result)
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error listing {service.plural.replace('_', ' ')}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


# ==================== STP ====================

@router.get("/", response_model=Dict[str, Any])
async def list_stp_readings(
    facility_id: Optional[str] = Query(None),
    status: Optional[SupplyStatus] = Query(None),
    within_normal_range: Optional[bool] = Query(None, description="false lists out-of-range readings"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    return await _list_ranged_readings(stp_service, current_user, facility_id, status,
                                       within_normal_range, page, limit)


add_crud_routes(router, stp_service, STPReadingCreate, STPReadingUpdate, MANAGER_ROLES)

# ==================== SWIMMING POOLS ====================

@pool_router.get("/", response_model=Dict[str, Any])
async def list_swimming_pool_readings(
    facility_id: Optional[str] = Query(None),
    status: Optional[SupplyStatus] = Query(None),
    within_normal_range: Optional[bool] = Query(None, description="false lists out-of-range readings"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    return await _list_ranged_readings(swimming_pool_service, current_user, facility_id, status,
                                       within_normal_range, page, limit)


add_crud_routes(pool_router, swimming_pool_service, SwimmingPoolReadingCreate, SwimmingPoolReadingUpdate,
                MANAGER_ROLES)

# ==================== WTP / RO PLANTS ====================

add_list_route(wtp_router, wtp_service, SupplyStatus)
add_crud_routes(wtp_router, wtp_service, WTPReadingCreate, WTPReadingUpdate, MANAGER_ROLES)

add_list_route(ro_router, ro_plant_service, SupplyStatus)
add_crud_routes(ro_router, ro_plant_service, ROPlantReadingCreate, ROPlantReadingUpdate, MANAGER_ROLES)
