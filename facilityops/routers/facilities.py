from fastapi import APIRouter, HTTPException, Depends, Query, Path
from typing import Dict, Any, Optional
import logging

from ..auth.dependencies import get_current_user, require_role
from ..core.errors import AppError
from ..core.responses import success_response
from ..models.facility import FacilityBulkCreate, FacilityCreate, FacilityUpdate
from ..models.user import ADMIN_ROLES
from ..services.facility_service import facility_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/facilities",
    tags=["Facilities"],
    responses={404: {"description": "Not found"}}
)


@router.post("/", response_model=Dict[str, Any], status_code=201)
async def create_facility(
    payload: FacilityCreate,
    current_user: Dict[str, Any] = Depends(require_role(ADMIN_ROLES))
):
    """Onboard a facility: facility record, manager account and default service catalogs."""
    try:
        result = await facility_service.create_facility(payload.model_dump(mode="json"), current_user)
        return success_response(result, "Facility created successfully")
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error creating facility: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/bulk", response_model=Dict[str, Any])
async def bulk_create_facilities(
    payload: FacilityBulkCreate,
    current_user: Dict[str, Any] = Depends(require_role(ADMIN_ROLES))
):
    try:
        result = await facility_service.bulk_create(payload.facilities, current_user)
        return success_response(result, f"{result['created']} facilities created, {result['failed']} failed")
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error bulk creating facilities: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/", response_model=Dict[str, Any])
async def list_facilities(
    search: Optional[str] = Query(None, description="Search site, city, location or client name"),
    city: Optional[str] = Query(None),
    facility_type: Optional[str] = Query(None),
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        result = await facility_service.list_facilities(
            current_user, search=search, city=city, facility_type=facility_type,
            sort_by=sort_by, sort_order=sort_order, page=page, limit=limit,
        )
        return success_response(result)
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error listing facilities: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/stats", response_model=Dict[str, Any])
async def facility_stats(
    current_user: Dict[str, Any] = Depends(require_role(ADMIN_ROLES))
):
    try:
        return success_response(await facility_service.stats())
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error computing facility stats: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/tenant/{tenant_id}", response_model=Dict[str, Any])
async def get_facility_by_tenant(
    tenant_id: str = Path(..., description="Facility tenant id"),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        return success_response(await facility_service.get_by_tenant_id(tenant_id, current_user))
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error getting facility by tenant {tenant_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/tenant/{tenant_id}", response_model=Dict[str, Any])
async def update_facility_by_tenant(
    payload: FacilityUpdate,
    tenant_id: str = Path(..., description="Facility tenant id"),
    current_user: Dict[str, Any] = Depends(require_role(ADMIN_ROLES))
):
    try:
        facility = await facility_service.update_by_tenant_id(
            tenant_id, payload.model_dump(mode="json", exclude_unset=True), current_user
        )
        return success_response(facility, "Facility updated successfully")
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error updating facility by tenant {tenant_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/tenant/{tenant_id}", response_model=Dict[str, Any])
async def delete_facility_by_tenant(
    tenant_id: str = Path(..., description="Facility tenant id"),
    current_user: Dict[str, Any] = Depends(require_role(ADMIN_ROLES))
):
    try:
        facility = await facility_service.delete_by_tenant_id(tenant_id, current_user)
        return success_response({"id": facility["id"]}, "Facility deleted successfully")
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error deleting facility by tenant {tenant_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{facility_id}", response_model=Dict[str, Any])
async def get_facility(
    facility_id: str = Path(..., description="Facility document ID"),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        return success_response(await facility_service.get_facility(facility_id, current_user))
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error getting facility {facility_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/{facility_id}", response_model=Dict[str, Any])
async def update_facility(
    payload: FacilityUpdate,
    facility_id: str = Path(..., description="Facility document ID"),
    current_user: Dict[str, Any] = Depends(require_role(ADMIN_ROLES))
):
    try:
        facility = await facility_service.update_facility(
            facility_id, payload.model_dump(mode="json", exclude_unset=True), current_user
        )
        return success_response(facility, "Facility updated successfully")
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error updating facility {facility_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/{facility_id}", response_model=Dict[str, Any])
async def delete_facility(
    facility_id: str = Path(..., description="Facility document ID"),
    current_user: Dict[str, Any] = Depends(require_role(ADMIN_ROLES))
):
    try:
        await facility_service.delete_facility(facility_id, current_user)
        return success_response({"id": facility_id}, "Facility deleted successfully")
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error deleting facility {facility_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
