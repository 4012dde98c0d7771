"""
Daily Checklist Service - QR-scanned hygiene checklists and their status machine.

    PENDING -> IN_PROGRESS -> COMPLETED -> VERIFIED

Status is always re-derived from the items (see ``derive_overall_status``);
item completion and verification run inside a transaction so concurrent
scans of the same checklist cannot overwrite each other.
"""

from typing import Any, Dict, List, Optional
from collections import defaultdict
import logging

from .scoped_resource_service import FacilityScopedService
from .floor_location_service import floor_location_service
from .hygiene_section_service import hygiene_section_service
from ..auth.access import ensure_access, resolve_create_facility
from ..core.clock import local_today, parse_date, utc_now
from ..core.errors import DuplicateError, NotFoundError, ValidationError
from ..core.responses import sort_documents
from ..models.hygiene import ChecklistStatus, derive_overall_status

logger = logging.getLogger(__name__)


def apply_item_completion(checklist: Dict[str, Any], item_index: int, actor_id: str,
                          now, notes: Optional[str] = None) -> Dict[str, Any]:
    """Mark one item done and roll the result up into the checklist (in place)."""
    items = checklist.get("checklist_items") or []
    if item_index < 0 or item_index >= len(items):
        raise ValidationError("Invalid item index")

    item = items[item_index]
    item["is_completed"] = True
    item["completed_at"] = now
    item["completed_by"] = actor_id
    if notes is not None:
        item["notes"] = notes

    if not checklist.get("started_at"):
        checklist["started_at"] = now

    completed = sum(1 for entry in items if entry.get("is_completed"))
    checklist["total_items"] = len(items)
    checklist["completed_items"] = completed

    if completed == len(items):
        # First completion that finished the list wins; later re-completions keep it
        if not checklist.get("completed_by"):
            checklist["completed_by"] = actor_id
        if not checklist.get("completed_at"):
            checklist["completed_at"] = now

    checklist["overall_status"] = derive_overall_status(items, bool(checklist.get("verified_by"))).value
    return checklist


def apply_verification(checklist: Dict[str, Any], actor_id: str, now) -> Dict[str, Any]:
    if checklist.get("verified_by") or checklist.get("overall_status") == ChecklistStatus.VERIFIED.value:
        raise ValidationError("Checklist already verified")
    if checklist.get("overall_status") != ChecklistStatus.COMPLETED.value:
        raise ValidationError("Only completed checklists can be verified")

    checklist["verified_by"] = actor_id
    checklist["verified_at"] = now
    checklist["overall_status"] = derive_overall_status(checklist.get("checklist_items") or [], True).value
    return checklist


def _as_date(value: Optional[str], field: str) -> Optional[str]:
    if not value:
        return None
    try:
        return parse_date(value).isoformat()
    except ValueError:
        raise ValidationError(f"Invalid {field}, expected YYYY-MM-DD")


class DailyChecklistService(FacilityScopedService):
    collection_key = "daily_checklists"
    label = "Daily checklist"
    plural = "daily_checklists"
    sort_field = "checklist_date"

    async def _ensure_in_facility(self, service: FacilityScopedService, document_id: str,
                                  facility_id: str, message: str) -> Dict[str, Any]:
        try:
            document = await service.fetch(document_id)
        except NotFoundError:
            raise ValidationError(message)
        if document.get("facility_id") != facility_id:
            raise ValidationError(message)
        return document

    async def create(self, data: Dict[str, Any], actor: dict) -> Dict[str, Any]:
        facility_id = resolve_create_facility(actor, data.get("facility_id"))
        await self._ensure_in_facility(floor_location_service, data["floor_location_id"],
                                       facility_id, "Invalid floor location")
        await self._ensure_in_facility(hygiene_section_service, data["hygiene_section_id"],
                                       facility_id, "Invalid hygiene section")

        now = utc_now()
        checklist_date = _as_date(str(data["checklist_date"]), "checklist date")
        items = [
            {
                "item_name": item["item_name"],
                "description": item.get("description"),
                "is_completed": False,
                "completed_at": None,
                "completed_by": None,
                "notes": None,
            }
            for item in data["checklist_items"]
        ]
        record = {
            "facility_id": facility_id,
            "hygiene_section_id": data["hygiene_section_id"],
            "floor_location_id": data["floor_location_id"],
            "checklist_date": checklist_date,
            "checklist_items": items,
            "assigned_department": data["assigned_department"],
            "overall_status": derive_overall_status(items).value,
            "total_items": len(items),
            "completed_items": 0,
            "started_at": None,
            "completed_at": None,
            "completed_by": None,
            "verified_by": None,
            "verified_at": None,
            "is_active": True,
            "created_by": actor.get("id"),
            "updated_by": actor.get("id"),
            "created_at": now,
            "updated_at": now,
            "is_deleted": False,
        }
        checklist_id = self.db.new_id(self.collection)

        def _create(scope):
            duplicates = scope.query(self.collection, [
                ("facility_id", "==", facility_id),
                ("hygiene_section_id", "==", record["hygiene_section_id"]),
                ("floor_location_id", "==", record["floor_location_id"]),
                ("checklist_date", "==", checklist_date),
                ("is_deleted", "==", False),
            ])
            if duplicates:
                raise DuplicateError("Daily checklist already exists for this date and location")
            scope.set(self.collection, checklist_id, record)
            return {**record, "id": checklist_id}

        created = await self.db.run_transaction(_create)
        logger.info(f"Daily checklist {checklist_id} created for floor {record['floor_location_id']} on {checklist_date}")
        return created

    async def list_checklists(self, actor: dict, facility_id: Optional[str] = None,
                              checklist_date: Optional[str] = None, status: Optional[str] = None,
                              assigned_department: Optional[str] = None,
                              floor_location_id: Optional[str] = None,
                              hygiene_section_id: Optional[str] = None,
                              page: int = 1, limit: int = 10) -> Dict[str, Any]:
        filters = self.equality_filters(
            checklist_date=_as_date(checklist_date, "checklist date"),
            overall_status=status,
            assigned_department=assigned_department,
            floor_location_id=floor_location_id,
            hygiene_section_id=hygiene_section_id,
        )
        return await self.list(actor, facility_id=facility_id, filters=filters, page=page, limit=limit)

    async def _transition(self, checklist_id: str, actor: dict, apply) -> Dict[str, Any]:
        now = utc_now()

        def _run(scope):
            checklist = scope.get(self.collection, checklist_id)
            if not checklist or checklist.get("is_deleted"):
                raise NotFoundError("Daily checklist not found")
            ensure_access(actor, checklist.get("facility_id"), "update")
            apply(checklist, now)
            checklist["updated_at"] = now
            checklist["updated_by"] = actor.get("id")
            scope.set(self.collection, checklist_id, checklist)
            return checklist

        return await self.db.run_transaction(_run)

    async def complete_item(self, checklist_id: str, item_index: int, actor: dict,
                            notes: Optional[str] = None) -> Dict[str, Any]:
        checklist = await self._transition(
            checklist_id, actor,
            lambda checklist, now: apply_item_completion(checklist, item_index, actor.get("id"), now, notes),
        )
        logger.info(f"Checklist {checklist_id} item {item_index} completed by {actor.get('id')} "
                    f"-> {checklist['overall_status']}")
        return checklist

    async def verify(self, checklist_id: str, actor: dict) -> Dict[str, Any]:
        checklist = await self._transition(
            checklist_id, actor,
            lambda checklist, now: apply_verification(checklist, actor.get("id"), now),
        )
        logger.info(f"Checklist {checklist_id} verified by {actor.get('id')}")
        return checklist

    async def get_by_qr(self, qr_code: str, actor: dict, checklist_date: Optional[str] = None) -> Dict[str, Any]:
        """
        Resolve a scanned floor QR code to that floor's checklists for one day.

        An unknown, inactive or deleted floor is a 404; a valid floor with no
        checklists yet returns an empty list.
        """
        location = await floor_location_service.find_active_by_qr(qr_code)
        ensure_access(actor, location.get("facility_id"), "read")

        day = _as_date(checklist_date, "checklist date") or local_today().isoformat()
        checklists = await self.query_scoped(actor, location["facility_id"], [
            ("floor_location_id", "==", location["id"]),
            ("checklist_date", "==", day),
        ])
        return {
            "floor_location": location,
            "checklist_date": day,
            "daily_checklists": sort_documents(checklists, "created_at"),
        }

    async def stats(self, actor: dict, facility_id: Optional[str] = None,
                    start_date: Optional[str] = None, end_date: Optional[str] = None) -> Dict[str, Any]:
        start = _as_date(start_date, "start date")
        end = _as_date(end_date, "end date")
        checklists: List[Dict[str, Any]] = await self.query_scoped(actor, facility_id)
        if start:
            checklists = [c for c in checklists if (c.get("checklist_date") or "") >= start]
        if end:
            checklists = [c for c in checklists if (c.get("checklist_date") or "") <= end]

        by_status: Dict[str, Dict[str, int]] = {
            status.value: {"count": 0, "total_items": 0, "completed_items": 0} for status in ChecklistStatus
        }
        by_department: Dict[str, Dict[str, int]] = defaultdict(
            lambda: {"total": 0, "pending": 0, "in_progress": 0, "completed": 0, "verified": 0}
        )

        for checklist in checklists:
            status = checklist.get("overall_status", ChecklistStatus.PENDING.value)
            bucket = by_status.setdefault(status, {"count": 0, "total_items": 0, "completed_items": 0})
            bucket["count"] += 1
            bucket["total_items"] += checklist.get("total_items", 0)
            bucket["completed_items"] += checklist.get("completed_items", 0)

            department = by_department[checklist.get("assigned_department", "UNASSIGNED")]
            department["total"] += 1
            department[status.lower()] = department.get(status.lower(), 0) + 1

        return {
            "total_checklists": len(checklists),
            "overall_stats": [{"status": status, **counts} for status, counts in by_status.items()],
            "department_stats": [
                {"department": name, **counts} for name, counts in sorted(by_department.items())
            ],
        }


daily_checklist_service = DailyChecklistService()
