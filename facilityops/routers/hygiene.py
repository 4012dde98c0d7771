"""Hygiene sections and uploaded hygiene checklist templates."""

from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Dict, Any, Optional
import logging

from ..auth.dependencies import get_current_user
from ..core.errors import AppError
from ..core.responses import success_response
from ..models.hygiene import (
    HygieneChecklistCreate,
    HygieneChecklistType,
    HygieneChecklistUpdate,
    HygieneSectionCreate,
    HygieneSectionUpdate,
)
from ..models.user import MANAGER_ROLES
from ..services.hygiene_checklist_service import hygiene_checklist_service
from ..services.hygiene_section_service import hygiene_section_service
from .resource_routes import add_crud_routes

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/hygiene-sections", tags=["Hygiene Sections"])
checklist_router = APIRouter(prefix="/api/hygiene-checklists", tags=["Hygiene Checklists"])


@router.get("/", response_model=Dict[str, Any])
async def list_hygiene_sections(
    facility_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        result = await hygiene_section_service.list(
            current_user,
            facility_id=facility_id,
            filters=hygiene_section_service.equality_filters(is_active=is_active),
            search=search,
            page=page,
            limit=limit,
        )
        return success_response(result)
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error listing hygiene sections: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@checklist_router.get("/", response_model=Dict[str, Any])
async def list_hygiene_checklists(
    facility_id: Optional[str] = Query(None),
    section_id: Optional[str] = Query(None),
    checklist_type: Optional[HygieneChecklistType] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        result = await hygiene_checklist_service.list(
            current_user,
            facility_id=facility_id,
            filters=hygiene_checklist_service.equality_filters(
                section_id=section_id,
                checklist_type=checklist_type.value if checklist_type else None,
            ),
            page=page,
            limit=limit,
        )
        return success_response(result)
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error listing hygiene checklists: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


add_crud_routes(router, hygiene_section_service, HygieneSectionCreate, HygieneSectionUpdate, MANAGER_ROLES)
add_crud_routes(checklist_router, hygiene_checklist_service, HygieneChecklistCreate, HygieneChecklistUpdate,
                MANAGER_ROLES)
