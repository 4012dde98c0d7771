"""
Facility Service - facility records and the onboarding flow.

Onboarding runs in two phases:

1. One transaction writes the facility and either provisions a manager
   account for the facility email or attaches the facility to the user who
   already owns that email. Any failure rolls back both writes.
2. After commit, both default service catalogs are initialized. Failures
   there are logged and reported as warnings; the facility stays valid and
   the catalogs are created lazily on first read.
"""

from typing import Any, Dict, List, Optional
from collections import Counter
import logging
import uuid

from pydantic import ValidationError as PydanticValidationError

from ..auth.access import ensure_access, is_privileged, managed_facilities
from ..auth.security import get_password_hash
from ..core.clock import utc_now
from ..core.config import settings
from ..core.errors import AppError, NotFoundError
from ..core.responses import matches_search, paginate, sort_documents
from ..database.collections import COLLECTIONS
from ..database.database_service import database_service
from ..models.facility import FacilityCreate
from ..models.user import (
    ONBOARDING_MANAGER_GRANTS,
    EmploymentStatus,
    UserRole,
    UserStatus,
    VerificationStatus,
    build_permissions,
)
from .service_catalog_service import iot_catalog_service, service_catalog_service

logger = logging.getLogger(__name__)

IMMUTABLE_FIELDS = {"id", "tenant_id", "created_at", "created_by"}
SEARCH_FIELDS = ["site_name", "city", "location", "client_name"]
SORTABLE_FIELDS = {"created_at", "updated_at", "site_name", "city", "facility_type"}


def derive_manager_password(client_name: str, tenant_id: str) -> str:
    """Default password for an onboarded manager: client name without whitespace, lower-cased, @ tenant prefix."""
    return "".join(client_name.split()).lower() + "@" + tenant_id[:8]


def split_client_name(client_name: str):
    parts = client_name.split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


class FacilityService:
    def __init__(self):
        self.db = database_service

    # ===== Onboarding =====

    def _manager_document(self, facility_id: str, facility: Dict[str, Any], email: str,
                          password: str, actor: Optional[dict], now) -> Dict[str, Any]:
        first_name, last_name = split_client_name(facility.get("client_name", ""))
        return {
            "email": email,
            "password_hash": get_password_hash(password),
            "first_name": first_name,
            "last_name": last_name,
            "phone": facility.get("contact_no"),
            "role": UserRole.FACILITY_MANAGER.value,
            "status": UserStatus.ACTIVE.value,
            "verification_status": VerificationStatus.VERIFIED.value,
            "email_verified": True,
            "managed_facilities": [facility_id],
            "permissions": build_permissions(ONBOARDING_MANAGER_GRANTS),
            "profile": {
                "job_title": facility.get("position"),
                "employment_status": EmploymentStatus.ACTIVE.value,
            },
            "created_by": actor.get("id") if actor else None,
            "updated_by": actor.get("id") if actor else None,
            "created_at": now,
            "updated_at": now,
            "is_deleted": False,
        }

    async def create_facility(self, data: Dict[str, Any], actor: Optional[dict] = None) -> Dict[str, Any]:
        now = utc_now()
        facility_id = self.db.new_id(COLLECTIONS['facilities'])
        tenant_id = uuid.uuid4().hex

        facility = {key: value for key, value in data.items() if key not in IMMUTABLE_FIELDS}
        facility.update({
            "tenant_id": tenant_id,
            "created_by": actor.get("id") if actor else None,
            "updated_by": actor.get("id") if actor else None,
            "created_at": now,
            "updated_at": now,
        })

        email = (facility.get("email") or "").strip().lower() or None
        facility["email"] = email

        manager_id = None
        manager_password = None
        manager = None
        if email:
            # Hash outside the transaction; Firestore may re-run the callback
            manager_id = self.db.new_id(COLLECTIONS['users'])
            manager_password = derive_manager_password(facility.get("client_name", ""), tenant_id)
            manager = self._manager_document(facility_id, facility, email, manager_password, actor, now)

        def _onboard(scope):
            email_index = scope.get(COLLECTIONS['user_emails'], email) if email else None
            existing_user = scope.get(COLLECTIONS['users'], email_index["user_id"]) if email_index else None

            scope.set(COLLECTIONS['facilities'], facility_id, facility)

            if not email:
                return {"outcome": "none"}

            if existing_user:
                facilities = list(existing_user.get("managed_facilities") or [])
                if facility_id not in facilities:
                    facilities.append(facility_id)
                scope.update(COLLECTIONS['users'], existing_user["id"], {
                    "managed_facilities": facilities,
                    "updated_at": now,
                })
                return {"outcome": "assigned", "user_id": existing_user["id"]}

            scope.set(COLLECTIONS['users'], manager_id, manager)
            scope.set(COLLECTIONS['user_emails'], email, {
                "user_id": manager_id,
                "email": email,
                "created_at": now,
            })
            return {"outcome": "created", "user_id": manager_id}

        try:
            result = await self.db.run_transaction(_onboard)
        except AppError:
            raise
        except Exception as e:
            logger.error(f"❌ Facility onboarding rolled back for '{facility.get('site_name')}': {e}")
            raise AppError("Failed to create facility")

        logger.info(f"✅ Facility {facility_id} created (tenant {tenant_id}, manager: {result['outcome']})")

        warnings = await self._bootstrap_catalogs(facility_id, facility, actor)

        response: Dict[str, Any] = {"facility": {**facility, "id": facility_id}}
        if result["outcome"] == "created" and self._is_new_account(manager):
            response["manager_credentials"] = {
                "email": email,
                "password": manager_password,
                "message": "Please share these credentials with the facility manager. They should change the password after first login.",
            }
        elif result["outcome"] == "assigned":
            response["manager_assigned"] = {"user_id": result["user_id"], "email": email}
        if warnings:
            response["warnings"] = warnings
        return response

    def _is_new_account(self, user: Optional[dict]) -> bool:
        if not user or not user.get("created_at"):
            return False
        age = (utc_now() - user["created_at"]).total_seconds()
        return age <= settings.NEW_ACCOUNT_WINDOW_SECONDS

    async def _bootstrap_catalogs(self, facility_id: str, facility: Dict[str, Any],
                                  actor: Optional[dict]) -> List[str]:
        created_by = actor.get("id") if actor and actor.get("id") else facility_id
        warnings = []
        for catalog_service in (service_catalog_service, iot_catalog_service):
            try:
                await catalog_service.initialize(
                    facility_id,
                    facility.get("site_name", ""),
                    facility.get("facility_type", ""),
                    created_by,
                    reuse_existing=True,
                )
            except Exception as e:
                logger.warning(f"⚠️ Could not initialize {catalog_service.kind.label} for facility {facility_id}: {e}")
                warnings.append(f"{catalog_service.kind.label} could not be initialized; they will be created on first access")
        return warnings

    async def bulk_create(self, entries: List[Dict[str, Any]], actor: Optional[dict] = None) -> Dict[str, Any]:
        results = []
        for index, entry in enumerate(entries):
            try:
                payload = FacilityCreate.model_validate(entry).model_dump(mode="json")
                created = await self.create_facility(payload, actor)
                results.append({"index": index, "success": True, **created})
            except PydanticValidationError as e:
                results.append({"index": index, "success": False,
                                "error": "; ".join(err["msg"] for err in e.errors())})
            except AppError as e:
                results.append({"index": index, "success": False, "error": e.message})

        created_count = sum(1 for result in results if result["success"])
        return {"created": created_count, "failed": len(results) - created_count, "results": results}

    # ===== Reads =====

    async def get_facility(self, facility_id: str, actor: dict) -> Dict[str, Any]:
        success, facility, error = await self.db.get_document(COLLECTIONS['facilities'], facility_id)
        if not success:
            raise AppError(f"Failed to load facility: {error}")
        if not facility:
            raise NotFoundError("Facility not found")
        ensure_access(actor, facility_id, "read")
        return facility

    async def get_by_tenant_id(self, tenant_id: str, actor: dict) -> Dict[str, Any]:
        success, facilities, error = await self.db.query_documents(
            COLLECTIONS['facilities'], [("tenant_id", "==", tenant_id)], limit=1
        )
        if not success:
            raise AppError(f"Failed to load facility: {error}")
        if not facilities:
            raise NotFoundError("Facility not found")
        ensure_access(actor, facilities[0]["id"], "read")
        return facilities[0]

    async def list_facilities(self, actor: dict, search: Optional[str] = None, city: Optional[str] = None,
                              facility_type: Optional[str] = None, sort_by: str = "created_at",
                              sort_order: str = "desc", page: int = 1, limit: int = 10) -> Dict[str, Any]:
        filters = [("facility_type", "==", facility_type)] if facility_type else []
        success, facilities, error = await self.db.query_documents(COLLECTIONS['facilities'], filters)
        if not success:
            raise AppError(f"Failed to list facilities: {error}")

        if not is_privileged(actor):
            allowed = set(managed_facilities(actor))
            facilities = [facility for facility in facilities if facility["id"] in allowed]

        facilities = [
            facility for facility in facilities
            if matches_search(facility, search, SEARCH_FIELDS) and matches_search(facility, city, ["city"])
        ]

        sort_field = sort_by if sort_by in SORTABLE_FIELDS else "created_at"
        facilities = sort_documents(facilities, sort_field, descending=sort_order != "asc")
        items, pagination = paginate(facilities, page, limit)
        return {"facilities": items, "pagination": pagination}

    async def stats(self) -> Dict[str, Any]:
        success, facilities, error = await self.db.query_documents(COLLECTIONS['facilities'])
        if not success:
            raise AppError(f"Failed to load facility statistics: {error}")

        by_type = Counter(facility.get("facility_type") for facility in facilities)
        by_city = Counter(facility.get("city") for facility in facilities)
        recent = sort_documents(facilities, "created_at", descending=True)[:5]

        return {
            "total_facilities": len(facilities),
            "facilities_by_type": [{"facility_type": key, "count": count} for key, count in by_type.most_common()],
            "facilities_by_city": [{"city": key, "count": count} for key, count in by_city.most_common(10)],
            "recent_facilities": [
                {key: facility.get(key) for key in ("id", "site_name", "city", "facility_type", "created_at")}
                for facility in recent
            ],
        }

    # ===== Writes =====

    async def update_facility(self, facility_id: str, data: Dict[str, Any], actor: dict) -> Dict[str, Any]:
        facility = await self.get_facility(facility_id, actor)
        ensure_access(actor, facility_id, "update")

        changes = {key: value for key, value in data.items() if key not in IMMUTABLE_FIELDS}
        changes["updated_at"] = utc_now()
        changes["updated_by"] = actor.get("id")

        success, error = await self.db.update_document(COLLECTIONS['facilities'], facility_id, changes)
        if not success:
            raise AppError(f"Failed to update facility: {error}")
        return {**facility, **changes}

    async def update_by_tenant_id(self, tenant_id: str, data: Dict[str, Any], actor: dict) -> Dict[str, Any]:
        facility = await self.get_by_tenant_id(tenant_id, actor)
        return await self.update_facility(facility["id"], data, actor)

    async def delete_facility(self, facility_id: str, actor: dict) -> Dict[str, Any]:
        facility = await self.get_facility(facility_id, actor)
        ensure_access(actor, facility_id, "delete")
        success, error = await self.db.delete_document(COLLECTIONS['facilities'], facility_id)
        if not success:
            raise AppError(f"Failed to delete facility: {error}")
        logger.info(f"Facility {facility_id} deleted by {actor.get('id')}")
        return facility

    async def delete_by_tenant_id(self, tenant_id: str, actor: dict) -> Dict[str, Any]:
        facility = await self.get_by_tenant_id(tenant_id, actor)
        return await self.delete_facility(facility["id"], actor)


facility_service = FacilityService()
