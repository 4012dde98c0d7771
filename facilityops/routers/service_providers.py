from fastapi import APIRouter, HTTPException, Depends, Query, Path
from typing import Dict, Any, Optional
import logging

from ..auth.dependencies import get_current_user, require_role
from ..core.errors import AppError
from ..core.responses import success_response
from ..models.service_provider import (
    ContractStatus,
    ProviderCategory,
    ServiceProviderBulkUpdate,
    ServiceProviderCreate,
    ServiceProviderUpdate,
)
from ..models.user import MANAGER_ROLES
from ..services.service_provider_service import service_provider_service
from .resource_routes import add_crud_routes

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/service-providers",
    tags=["Service Providers"],
    responses={404: {"description": "Not found"}}
)


def _value(enum_member):
    return enum_member.value if enum_member is not None else None


@router.get("/", response_model=Dict[str, Any])
async def list_service_providers(
    facility_id: Optional[str] = Query(None),
    category: Optional[ProviderCategory] = Query(None),
    contract_status: Optional[ContractStatus] = Query(None),
    is_active: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        result = await service_provider_service.list_providers(
            current_user,
            facility_id=facility_id,
            category=_value(category),
            contract_status=_value(contract_status),
            is_active=is_active,
            search=search,
            page=page,
            limit=limit,
        )
        return success_response(result)
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error listing service providers: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/facility/{facility_id}/category/{category}", response_model=Dict[str, Any])
async def get_providers_by_category(
    facility_id: str = Path(...),
    category: str = Path(...),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        providers = await service_provider_service.by_category(facility_id, category, current_user)
        return success_response({"service_providers": providers, "count": len(providers)})
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error listing providers by category: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/facility/{facility_id}/active", response_model=Dict[str, Any])
async def get_active_providers(
    facility_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        providers = await service_provider_service.active(facility_id, current_user)
        return success_response({"service_providers": providers, "count": len(providers)})
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error listing active providers: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/facility/{facility_id}/search", response_model=Dict[str, Any])
async def search_providers(
    facility_id: str = Path(...),
    q: Optional[str] = Query(None, max_length=100),
    category: Optional[ProviderCategory] = Query(None),
    contract_status: Optional[ContractStatus] = Query(None),
    limit: int = Query(10, ge=1, le=50),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        providers = await service_provider_service.search(
            facility_id, q, current_user,
            category=_value(category), contract_status=_value(contract_status), limit=limit,
        )
        return success_response({"service_providers": providers, "count": len(providers)})
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error searching providers: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/facility/{facility_id}/statistics", response_model=Dict[str, Any])
async def provider_statistics(
    facility_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        return success_response(await service_provider_service.statistics(facility_id, current_user))
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error computing provider statistics: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/facility/{facility_id}/bulk-update", response_model=Dict[str, Any])
async def bulk_update_providers(
    payload: ServiceProviderBulkUpdate,
    facility_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(require_role(MANAGER_ROLES))
):
    try:
        items = [item.model_dump(mode="json", exclude_unset=True) for item in payload.providers]
        result = await service_provider_service.bulk_update(facility_id, items, current_user)
        return success_response(result, f"{result['updated']} providers updated, {result['failed']} failed")
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error bulk updating providers: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


add_crud_routes(router, service_provider_service, ServiceProviderCreate, ServiceProviderUpdate, MANAGER_ROLES)
