"""
Account routes for the authenticated user.

Tokens are issued elsewhere; this API only verifies bearer tokens
(see ``auth.dependencies.get_current_user``).
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Depends

from ..auth.dependencies import get_current_user
from ..core.errors import AppError
from ..core.responses import success_response
from ..models.user import PasswordChange, public_user
from ..services.employee_service import employee_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["authentication"])


@router.get("/me", response_model=dict)
async def get_me(current_user: Dict[str, Any] = Depends(get_current_user)):
    return success_response(public_user(current_user))


@router.patch("/change-password", response_model=dict)
async def change_password(
    payload: PasswordChange,
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        await employee_service.change_password(current_user, payload.current_password, payload.new_password)
        return success_response(message="Password changed successfully")
    except (AppError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Error changing password: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
