from fastapi import APIRouter, HTTPException, Depends, Query, Path, Body
from typing import Dict, Any, Optional
import logging

from ..auth.dependencies import get_current_user, require_role
from ..core.errors import AppError
from ..core.responses import success_response
from ..models.hygiene import ChecklistItemComplete, ChecklistStatus, DailyChecklistCreate, Department
from ..models.user import MANAGER_ROLES, VERIFIER_ROLES
from ..services.daily_checklist_service import daily_checklist_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/daily-checklists",
    tags=["Daily Checklists"],
    responses={404: {"description": "Not found"}}
)


@router.post("/", response_model=Dict[str, Any], status_code=201)
async def create_daily_checklist(
    payload: DailyChecklistCreate,
    current_user: Dict[str, Any] = Depends(require_role(MANAGER_ROLES))
):
    try:
        checklist = await daily_checklist_service.create(payload.model_dump(mode="json"), current_user)
        return success_response(checklist, "Daily checklist created successfully")
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error creating daily checklist: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/", response_model=Dict[str, Any])
async def list_daily_checklists(
    facility_id: Optional[str] = Query(None),
    checklist_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    status: Optional[ChecklistStatus] = Query(None),
    assigned_department: Optional[Department] = Query(None),
    floor_location_id: Optional[str] = Query(None),
    hygiene_section_id: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        result = await daily_checklist_service.list_checklists(
            current_user,
            facility_id=facility_id,
            checklist_date=checklist_date,
            status=status.value if status else None,
            assigned_department=assigned_department.value if assigned_department else None,
            floor_location_id=floor_location_id,
            hygiene_section_id=hygiene_section_id,
            page=page,
            limit=limit,
        )
        return success_response(result)
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error listing daily checklists: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/stats", response_model=Dict[str, Any])
async def daily_checklist_stats(
    facility_id: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    end_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        stats = await daily_checklist_service.stats(current_user, facility_id, start_date, end_date)
        return success_response(stats)
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error computing daily checklist stats: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/qr/{qr_code}", response_model=Dict[str, Any])
async def get_checklists_by_qr(
    qr_code: str = Path(..., description="QR code printed on the floor"),
    checklist_date: Optional[str] = Query(None, description="YYYY-MM-DD, defaults to today"),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    """Resolve a scanned floor QR code to that floor's checklists for the day."""
    try:
        result = await daily_checklist_service.get_by_qr(qr_code, current_user, checklist_date)
        return success_response(result)
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error resolving QR code {qr_code}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{checklist_id}", response_model=Dict[str, Any])
async def get_daily_checklist(
    checklist_id: str = Path(..., description="Daily checklist document ID"),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        return success_response(await daily_checklist_service.get(checklist_id, current_user))
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error getting daily checklist {checklist_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/{checklist_id}/items/{item_index}/complete", response_model=Dict[str, Any])
async def complete_checklist_item(
    checklist_id: str = Path(..., description="Daily checklist document ID"),
    item_index: int = Path(..., description="Zero-based item index"),
    payload: Optional[ChecklistItemComplete] = Body(None),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        notes = payload.notes if payload else None
        checklist = await daily_checklist_service.complete_item(checklist_id, item_index, current_user, notes)
        return success_response(checklist, "Checklist item completed")
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error completing item {item_index} of checklist {checklist_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/{checklist_id}/verify", response_model=Dict[str, Any])
async def verify_daily_checklist(
    checklist_id: str = Path(..., description="Daily checklist document ID"),
    current_user: Dict[str, Any] = Depends(require_role(VERIFIER_ROLES))
):
    try:
        checklist = await daily_checklist_service.verify(checklist_id, current_user)
        return success_response(checklist, "Checklist verified successfully")
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error verifying checklist {checklist_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
