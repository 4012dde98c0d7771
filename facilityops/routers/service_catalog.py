"""
Service catalog routes. The regular and IoT catalogs expose the same
surface, so both routers are built from one definition:

    /api/services/...       regular facility services
    /api/iot-services/...   IoT integrations
"""

from fastapi import APIRouter, HTTPException, Depends, Query, Path
from typing import Dict, Any, Optional
import logging

from ..auth.dependencies import get_current_user, require_role
from ..core.errors import AppError
from ..core.responses import success_response
from ..models.service_catalog import (
    CatalogBulkUpdate,
    CatalogDetailsUpdate,
    CatalogInitialize,
    CatalogServiceAdd,
    CatalogServiceRemove,
    CatalogStatusUpdate,
)
from ..models.user import ADMIN_ROLES, MANAGER_ROLES
from ..services.service_catalog_service import (
    CatalogService,
    iot_catalog_service,
    service_catalog_service,
)

logger = logging.getLogger(__name__)


def _internal_error(action: str, e: Exception) -> HTTPException:
    logger.exception(f"Error {action}: {e}")
    return HTTPException(status_code=500, detail="Internal server error")


def build_catalog_router(service: CatalogService, prefix: str, tag: str) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[tag], responses={404: {"description": "Not found"}})
    label = service.kind.label

    @router.post("/initialize", response_model=Dict[str, Any], status_code=201)
    async def initialize_catalog(
        payload: CatalogInitialize,
        current_user: Dict[str, Any] = Depends(require_role(MANAGER_ROLES))
    ):
        try:
            catalog = await service.initialize_for_facility(payload.facility_id, current_user)
            return success_response(catalog, f"{label} initialized successfully")
        except (AppError, HTTPException):
            raise
        except Exception as e:
            raise _internal_error(f"initializing {label}", e)

    @router.get("/", response_model=Dict[str, Any])
    async def list_catalogs(
        facility_type: Optional[str] = Query(None),
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
        current_user: Dict[str, Any] = Depends(require_role(ADMIN_ROLES))
    ):
        try:
            return success_response(await service.list_catalogs(page, limit, facility_type))
        except (AppError, HTTPException):
            raise
        except Exception as e:
            raise _internal_error(f"listing {label}", e)

    @router.get("/statistics/global", response_model=Dict[str, Any])
    async def global_statistics(
        current_user: Dict[str, Any] = Depends(require_role(ADMIN_ROLES))
    ):
        try:
            return success_response(await service.global_statistics())
        except (AppError, HTTPException):
            raise
        except Exception as e:
            raise _internal_error(f"computing global {label} statistics", e)

    @router.get("/facility/{facility_id}", response_model=Dict[str, Any])
    async def get_facility_catalog(
        facility_id: str = Path(..., description="Facility document ID"),
        category: Optional[str] = Query(None),
        include_inactive: bool = Query(True),
        current_user: Dict[str, Any] = Depends(get_current_user)
    ):
        """Return the facility's catalog, creating the default one on first access."""
        try:
            catalog = await service.get_or_initialize(facility_id, current_user, category, include_inactive)
            return success_response(catalog)
        except (AppError, HTTPException):
            raise
        except Exception as e:
            raise _internal_error(f"getting {label} for facility {facility_id}", e)

    @router.post("/facility/{facility_id}/add-service", response_model=Dict[str, Any], status_code=201)
    async def add_service(
        payload: CatalogServiceAdd,
        facility_id: str = Path(..., description="Facility document ID"),
        current_user: Dict[str, Any] = Depends(require_role(MANAGER_ROLES))
    ):
        try:
            catalog = await service.add_service(facility_id, payload.model_dump(mode="json", exclude_none=True), current_user)
            return success_response(catalog, "Service added successfully")
        except (AppError, HTTPException):
            raise
        except Exception as e:
            raise _internal_error(f"adding service to {label}", e)

    @router.patch("/facility/{facility_id}/update-status", response_model=Dict[str, Any])
    async def update_service_status(
        payload: CatalogStatusUpdate,
        facility_id: str = Path(..., description="Facility document ID"),
        current_user: Dict[str, Any] = Depends(require_role(MANAGER_ROLES))
    ):
        try:
            catalog = await service.update_service_status(
                facility_id, payload.category, payload.service_name, payload.is_active, current_user
            )
            return success_response(catalog, "Service status updated successfully")
        except (AppError, HTTPException):
            raise
        except Exception as e:
            raise _internal_error(f"updating service status in {label}", e)

    @router.patch("/facility/{facility_id}/update-details", response_model=Dict[str, Any])
    async def update_service_details(
        payload: CatalogDetailsUpdate,
        facility_id: str = Path(..., description="Facility document ID"),
        current_user: Dict[str, Any] = Depends(require_role(MANAGER_ROLES))
    ):
        try:
            catalog = await service.update_service_details(
                facility_id, payload.model_dump(mode="json", exclude_none=True), current_user
            )
            return success_response(catalog, "Service details updated successfully")
        except (AppError, HTTPException):
            raise
        except Exception as e:
            raise _internal_error(f"updating service details in {label}", e)

    @router.patch("/facility/{facility_id}/bulk-update", response_model=Dict[str, Any])
    async def bulk_update_services(
        payload: CatalogBulkUpdate,
        facility_id: str = Path(..., description="Facility document ID"),
        current_user: Dict[str, Any] = Depends(require_role(MANAGER_ROLES))
    ):
        try:
            updates = [update.model_dump() for update in payload.services]
            catalog = await service.bulk_update(facility_id, updates, current_user)
            return success_response(catalog, "Services updated successfully")
        except (AppError, HTTPException):
            raise
        except Exception as e:
            raise _internal_error(f"bulk updating {label}", e)

    @router.delete("/facility/{facility_id}/remove-service", response_model=Dict[str, Any])
    async def remove_service(
        payload: CatalogServiceRemove,
        facility_id: str = Path(..., description="Facility document ID"),
        current_user: Dict[str, Any] = Depends(require_role(MANAGER_ROLES))
    ):
        try:
            catalog = await service.remove_service(
                facility_id, payload.category, payload.service_name, current_user
            )
            return success_response(catalog, "Service removed successfully")
        except (AppError, HTTPException):
            raise
        except Exception as e:
            raise _internal_error(f"removing service from {label}", e)

    @router.get("/facility/{facility_id}/statistics", response_model=Dict[str, Any])
    async def catalog_statistics(
        facility_id: str = Path(..., description="Facility document ID"),
        current_user: Dict[str, Any] = Depends(get_current_user)
    ):
        try:
            return success_response(await service.statistics(facility_id, current_user))
        except (AppError, HTTPException):
            raise
        except Exception as e:
            raise _internal_error(f"computing {label} statistics", e)

    @router.delete("/facility/{facility_id}", response_model=Dict[str, Any])
    async def delete_catalog(
        facility_id: str = Path(..., description="Facility document ID"),
        current_user: Dict[str, Any] = Depends(require_role(MANAGER_ROLES))
    ):
        try:
            await service.delete(facility_id, current_user)
            return success_response({"facility_id": facility_id}, f"{label} deleted successfully")
        except (AppError, HTTPException):
            raise
        except Exception as e:
            raise _internal_error(f"deleting {label}", e)

    return router


router = build_catalog_router(service_catalog_service, "/api/services", "Service Management")
iot_router = build_catalog_router(iot_catalog_service, "/api/iot-services", "IoT Service Management")
