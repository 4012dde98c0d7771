from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import logging

from .security import decode_access_token
from ..database.database_service import database_service
from ..database.collections import COLLECTIONS
from ..models.user import UserStatus

security = HTTPBearer()
logger = logging.getLogger(__name__)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> dict:
    """
    Verify the bearer token and return the stored user document.
    The stored role and managed facilities are authoritative, not the token claims.
    Raises 401 if the token is invalid or the account is unusable.
    """
    claims = decode_access_token(credentials.credentials)
    if not claims or not claims.get("id"):
        logger.warning("[Auth] Token verification failed - invalid token")
        raise _unauthorized("Invalid authentication credentials")

    success, user, error = await database_service.get_document(COLLECTIONS['users'], claims["id"])
    if not success:
        logger.error(f"[Auth] ❌ Could not load user {claims['id']}: {error}")
        raise _unauthorized("Authentication failed")

    if not user or user.get("is_deleted"):
        logger.warning(f"[Auth] Token refers to unknown or deleted user {claims['id']}")
        raise _unauthorized("User no longer exists")

    if user.get("status") != UserStatus.ACTIVE.value:
        logger.warning(f"[Auth] Inactive account {user.get('email')} (status: {user.get('status')})")
        raise _unauthorized("Account is not active")

    user.setdefault("managed_facilities", [])
    logger.info(f"[Auth] ✅ Authenticated user: {user.get('email')} with role: {user.get('role')}")
    return user


def require_role(required_roles: list):
    def role_checker(current_user: dict = Depends(get_current_user)):
        user_role = current_user.get("role")

        if user_role not in required_roles:
            logger.warning(f"[Auth] Role check failed: user role '{user_role}' not in required roles {required_roles}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions"
            )
        return current_user
    return role_checker
