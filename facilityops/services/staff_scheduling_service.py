"""
Staff scheduling resources: rosters, leave planners, shift schedules and
week-off planners. All four are plain facility-scoped records; the only
rules beyond scoping are the date ranges and leave approval stamping.
"""

from typing import Any, Dict, Optional
import logging

from .scoped_resource_service import FacilityScopedService
from ..core.clock import local_today, parse_date, utc_now
from ..core.errors import ValidationError
from ..core.responses import sort_documents
from ..models.staff_scheduling_models import PlannerStatus, leave_total_days

logger = logging.getLogger(__name__)

UPCOMING_LEAVE_LIMIT = 20


def _reject_null_dates(changes: Dict[str, Any], *fields: str):
    for field in fields:
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be null")


def _check_range(record: Dict[str, Any], start_field: str, end_field: str, message: str):
    start, end = record.get(start_field), record.get(end_field)
    if start and end and parse_date(end) < parse_date(start):
        raise ValidationError(message)


class RosterService(FacilityScopedService):
    collection_key = "rosters"
    label = "Roster"
    plural = "rosters"
    sort_field = "date"

    async def prepare_update(self, existing: Dict[str, Any], changes: Dict[str, Any],
                             actor: dict) -> Dict[str, Any]:
        _reject_null_dates(changes, "date")
        return changes


class LeavePlannerService(FacilityScopedService):
    collection_key = "leave_planners"
    label = "Leave"
    plural = "leave_planners"
    search_fields = ["reason", "remarks"]
    sort_field = "start_date"

    @staticmethod
    def _stamp_approval(record: Dict[str, Any], actor: dict) -> None:
        record["approved_by"] = actor.get("id")
        record["approved_date"] = utc_now()

    async def prepare_create(self, data: Dict[str, Any], facility_id: str, actor: dict) -> Dict[str, Any]:
        _check_range(data, "start_date", "end_date", "End date cannot be before start date")
        data["total_days"] = leave_total_days(parse_date(data["start_date"]), parse_date(data["end_date"]))
        data.setdefault("status", PlannerStatus.PENDING.value)
        data["applied_date"] = utc_now()
        if data["status"] == PlannerStatus.APPROVED.value:
            self._stamp_approval(data, actor)
        return data

    async def prepare_update(self, existing: Dict[str, Any], changes: Dict[str, Any],
                             actor: dict) -> Dict[str, Any]:
        _reject_null_dates(changes, "start_date", "end_date")
        merged = {**existing, **changes}
        if "start_date" in changes or "end_date" in changes:
            _check_range(merged, "start_date", "end_date", "End date cannot be before start date")
            changes["total_days"] = leave_total_days(parse_date(merged["start_date"]),
                                                     parse_date(merged["end_date"]))
        if (changes.get("status") == PlannerStatus.APPROVED.value
                and existing.get("status") != PlannerStatus.APPROVED.value):
            self._stamp_approval(changes, actor)
        return changes

    async def upcoming(self, actor: dict, facility_id: Optional[str] = None) -> Dict[str, Any]:
        """Approved leaves starting today or later, soonest first."""
        today = local_today().isoformat()
        leaves = await self.query_scoped(actor, facility_id, [("status", "==", PlannerStatus.APPROVED.value)])
        leaves = [leave for leave in leaves if (leave.get("start_date") or "") >= today]
        leaves = sort_documents(leaves, "start_date")[:UPCOMING_LEAVE_LIMIT]
        return {"leave_planners": leaves, "total": len(leaves)}


class ShiftScheduleService(FacilityScopedService):
    collection_key = "shift_schedules"
    label = "Shift schedule"
    plural = "shift_schedules"
    search_fields = ["shift_name"]
    sort_field = "shift_name"
    sort_descending = False

    async def prepare_create(self, data: Dict[str, Any], facility_id: str, actor: dict) -> Dict[str, Any]:
        if data.get("break_duration") is None:
            data["break_duration"] = 60
        return data


class WeekoffPlannerService(FacilityScopedService):
    collection_key = "weekoff_planners"
    label = "Week-off"
    plural = "weekoff_planners"
    sort_field = "week_start_date"

    async def prepare_create(self, data: Dict[str, Any], facility_id: str, actor: dict) -> Dict[str, Any]:
        _check_range(data, "week_start_date", "week_end_date", "Week end date cannot be before week start date")
        data.setdefault("status", PlannerStatus.PENDING.value)
        return data

    async def prepare_update(self, existing: Dict[str, Any], changes: Dict[str, Any],
                             actor: dict) -> Dict[str, Any]:
        _reject_null_dates(changes, "week_start_date", "week_end_date")
        _check_range({**existing, **changes}, "week_start_date", "week_end_date",
                     "Week end date cannot be before week start date")
        return changes


roster_service = RosterService()
leave_planner_service = LeavePlannerService()
shift_schedule_service = ShiftScheduleService()
weekoff_planner_service = WeekoffPlannerService()
