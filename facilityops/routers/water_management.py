"""Water management routes: tanks, borewells, Cauvery supply and tankers."""

from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Dict, Any, Optional
import logging

from ..auth.dependencies import get_current_user
from ..core.errors import AppError
from ..core.responses import success_response
from ..models.user import MANAGER_ROLES
from ..models.water import (
    BorewellCreate,
    BorewellUpdate,
    CauverySupplyCreate,
    CauverySupplyUpdate,
    SupplyStatus,
    TankType,
    TankerCreate,
    TankerUpdate,
    WaterTankCreate,
    WaterTankUpdate,
)
from ..services.water_management_service import (
    borewell_service,
    cauvery_supply_service,
    tanker_service,
    water_tank_service,
)
from .resource_routes import add_crud_routes, add_list_route

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/water-management/tanks", tags=["Water Management"])
borewell_router = APIRouter(prefix="/api/water-management/borewells", tags=["Water Management"])
cauvery_router = APIRouter(prefix="/api/water-management/cauvery", tags=["Water Management"])
tanker_router = APIRouter(prefix="/api/water-management/tankers", tags=["Water Management"])


# ==================== WATER TANKS ====================

@router.get("/", response_model=Dict[str, Any])
async def list_water_tanks(
    facility_id: Optional[str] = Query(None),
    status: Optional[SupplyStatus] = Query(None),
    type: Optional[TankType] = Query(None, description="Tank type"),
    search: Optional[str] = Query(None, description="Search tank name or location"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        result = await water_tank_service.list(
            current_user,
            facility_id=facility_id,
            filters=water_tank_service.equality_filters(
                status=status.value if status else None,
                type=type.value if type else None,
            ),
            search=search,
            page=page,
            limit=limit,
        )
        return success_response(result)
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error listing water tanks: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


add_crud_routes(router, water_tank_service, WaterTankCreate, WaterTankUpdate, MANAGER_ROLES)

# ==================== BOREWELLS / CAUVERY / TANKERS ====================

add_list_route(borewell_router, borewell_service, SupplyStatus)
add_crud_routes(borewell_router, borewell_service, BorewellCreate, BorewellUpdate, MANAGER_ROLES)

add_list_route(cauvery_router, cauvery_supply_service, SupplyStatus)
add_crud_routes(cauvery_router, cauvery_supply_service, CauverySupplyCreate, CauverySupplyUpdate, MANAGER_ROLES)

add_list_route(tanker_router, tanker_service, SupplyStatus)
add_crud_routes(tanker_router, tanker_service, TankerCreate, TankerUpdate, MANAGER_ROLES)
