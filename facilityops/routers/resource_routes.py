"""
Create / get / update / delete routes shared by the facility-scoped resources,
plus a plain status-filtered list for resources that need nothing more.

Each resource router declares its own list and lookup routes first, then
calls ``add_crud_routes`` so ``/{item_id}`` never shadows a fixed path.
"""

from fastapi import APIRouter, HTTPException, Depends, Path, Query
from typing import Dict, Any, List, Optional, Type
from enum import Enum
import logging

from pydantic import BaseModel

from ..auth.dependencies import get_current_user, require_role
from ..core.errors import AppError
from ..core.responses import success_response
from ..services.scoped_resource_service import FacilityScopedService

logger = logging.getLogger(__name__)


def add_crud_routes(router: APIRouter, service: FacilityScopedService,
                    create_model: Type[BaseModel], update_model: Type[BaseModel],
                    write_roles: List[str]) -> APIRouter:
    label = service.label

    @router.post("/", response_model=Dict[str, Any], status_code=201)
    async def create_item(
        payload: create_model,
        current_user: Dict[str, Any] = Depends(require_role(write_roles))
    ):
        try:
            item = await service.create(payload.model_dump(mode="json"), current_user)
            return success_response(item, f"{label} created successfully")
        except (AppError, HTTPException):
            raise
        except Exception as e:
            logger.exception(f"Error creating {label.lower()}: {e}")
            raise HTTPException(status_code=500, detail="Internal server error")

    @router.get("/{item_id}", response_model=Dict[str, Any])
    async def get_item(
        item_id: str = Path(..., description=f"{label} document ID"),
        current_user: Dict[str, Any] = Depends(get_current_user)
    ):
        try:
            return success_response(await service.get(item_id, current_user))
        except (AppError, HTTPException):
            raise
        except Exception as e:
            logger.exception(f"Error getting {label.lower()} {item_id}: {e}")
            raise HTTPException(status_code=500, detail="Internal server error")

    @router.put("/{item_id}", response_model=Dict[str, Any])
    async def update_item(
        payload: update_model,
        item_id: str = Path(..., description=f"{label} document ID"),
        current_user: Dict[str, Any] = Depends(require_role(write_roles))
    ):
        try:
            item = await service.update(item_id, payload.model_dump(mode="json", exclude_unset=True), current_user)
            return success_response(item, f"{label} updated successfully")
        except (AppError, HTTPException):
            raise
        except Exception as e:
            logger.exception(f"Error updating {label.lower()} {item_id}: {e}")
            raise HTTPException(status_code=500, detail="Internal server error")

    @router.delete("/{item_id}", response_model=Dict[str, Any])
    async def delete_item(
        item_id: str = Path(..., description=f"{label} document ID"),
        current_user: Dict[str, Any] = Depends(require_role(write_roles))
    ):
        try:
            await service.delete(item_id, current_user)
            return success_response({"id": item_id}, f"{label} deleted successfully")
        except (AppError, HTTPException):
            raise
        except Exception as e:
            logger.exception(f"Error deleting {label.lower()} {item_id}: {e}")
            raise HTTPException(status_code=500, detail="Internal server error")

    return router


def add_list_route(router: APIRouter, service: FacilityScopedService,
                   status_enum: Type[Enum]) -> APIRouter:
    """Paginated list filtered by facility and status, for resources with no other filters."""
    plural = service.plural.replace("_", " ")

    @router.get("/", response_model=Dict[str, Any])
    async def list_items(
        facility_id: Optional[str] = Query(None),
        status: Optional[status_enum] = Query(None),
        search: Optional[str] = Query(None),
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
        current_user: Dict[str, Any] = Depends(get_current_user)
    ):
        try:
            result = await service.list(
                current_user,
                facility_id=facility_id,
                filters=service.equality_filters(status=status.value if status else None),
                search=search,
                page=page,
                limit=limit,
            )
            return success_response(result)
        except (AppError, HTTPException):
            raise
        except Exception as e:
            logger.exception(f"Error listing {plural}: {e}")
            raise HTTPException(status_code=500, detail="Internal server error")

    return router
