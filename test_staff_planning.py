from datetime import timedelta

import pytest
from pydantic import ValidationError as PydanticValidationError

from facilityops.core.clock import local_today
from facilityops.core.errors import DuplicateError, ValidationError
from facilityops.models.power import PowerMeterCreate
from facilityops.models.staff_scheduling_models import (
    LeavePlannerCreate,
    LeavePlannerUpdate,
    ShiftScheduleCreate,
    WeekoffPlannerCreate,
    WeekoffPlannerUpdate,
)
from facilityops.services.power_management_service import power_management_service
from facilityops.services.staff_scheduling_service import (
    leave_planner_service,
    shift_schedule_service,
    weekoff_planner_service,
)

# Async tests
pytestmark = pytest.mark.asyncio


def leave(**overrides):
    payload = {"employee_id": "emp_1", "leave_type": "annual",
               "start_date": "2026-03-02", "end_date": "2026-03-06", "reason": "Family trip"}
    payload.update(overrides)
    return payload


async def test_leave_days_are_inclusive(fake_db, facility, manager):
    record = await leave_planner_service.create(leave(), manager)

    assert record["total_days"] == 5
    assert record["status"] == "pending"
    assert "approved_by" not in record

    updated = await leave_planner_service.update(record["id"], {"end_date": "2026-03-02"}, manager)
    assert updated["total_days"] == 1


async def test_approval_is_stamped(fake_db, facility, manager):
    record = await leave_planner_service.create(leave(), manager)

    approved = await leave_planner_service.update(record["id"], {"status": "approved"}, manager)

    assert approved["approved_by"] == "mgr_1"
    assert approved["approved_date"] is not None


async def test_leave_end_before_start(fake_db, facility, manager):
    with pytest.raises(PydanticValidationError):
        LeavePlannerCreate(**leave(start_date="2026-03-06", end_date="2026-03-02"))

    with pytest.raises(ValidationError):
        await leave_planner_service.create(leave(start_date="2026-03-06", end_date="2026-03-02"), manager)


async def test_upcoming_lists_approved_future_leaves(fake_db, facility, manager):
    today = local_today()
    soon = (today + timedelta(days=3)).isoformat()
    later = (today + timedelta(days=10)).isoformat()
    past = (today - timedelta(days=10)).isoformat()

    await leave_planner_service.create(leave(start_date=later, end_date=later, status="approved"), manager)
    await leave_planner_service.create(leave(start_date=soon, end_date=soon, status="approved"), manager)
    await leave_planner_service.create(leave(start_date=past, end_date=past, status="approved"), manager)
    await leave_planner_service.create(leave(start_date=soon, end_date=soon), manager)

    upcoming = await leave_planner_service.upcoming(manager)

    assert upcoming["total"] == 2
    assert [entry["start_date"] for entry in upcoming["leave_planners"]] == [soon, later]


async def test_shift_schedule_defaults_and_time_format(fake_db, facility, manager):
    with pytest.raises(PydanticValidationError):
        ShiftScheduleCreate(employee_id="emp_1", shift_name="Night", start_time="25:00", end_time="06:00")

    shift = await shift_schedule_service.create(
        {"employee_id": "emp_1", "shift_name": "Morning", "start_time": "06:00", "end_time": "14:00"}, manager
    )
    assert shift["break_duration"] == 60


async def test_weekoff_range(fake_db, facility, manager):
    with pytest.raises(PydanticValidationError):
        WeekoffPlannerCreate(employee_id="emp_1", week_start_date="2026-03-09",
                             week_end_date="2026-03-02", weekoff_days=["sunday"])

    record = await weekoff_planner_service.create({
        "employee_id": "emp_1", "week_start_date": "2026-03-02",
        "week_end_date": "2026-03-08", "weekoff_days": ["sunday"],
    }, manager)

    with pytest.raises(ValidationError):
        await weekoff_planner_service.update(record["id"], {"week_end_date": "2026-03-01"}, manager)


async def test_meter_ids_are_upper_cased_and_unique(fake_db, facility, manager):
    payload = PowerMeterCreate(meter_id=" em-101 ", location="Basement", connected_load=40,
                               units=1200, power_factor=0.92)
    assert payload.meter_id == "EM-101"

    meter = await power_management_service.create(payload.model_dump(mode="json"), manager)
    assert meter["meter_id"] == "EM-101"

    with pytest.raises(DuplicateError) as exc:
        await power_management_service.create(
            {"meter_id": "em-101", "location": "Roof", "connected_load": 5, "units": 0, "power_factor": 1},
            manager,
        )
    assert exc.value.message == "Meter ID already exists for this facility"


async def test_power_factor_range():
    with pytest.raises(PydanticValidationError):
        PowerMeterCreate(meter_id="EM-1", location="Lobby", connected_load=1, units=1, power_factor=1.5)


async def test_update_cannot_clear_dates(fake_db, facility, manager):
    with pytest.raises(PydanticValidationError):
        LeavePlannerUpdate(start_date=None)
    with pytest.raises(PydanticValidationError):
        WeekoffPlannerUpdate(week_end_date=None)
    assert LeavePlannerUpdate(reason="Moved").model_dump(exclude_unset=True) == {"reason": "Moved"}

    record = await leave_planner_service.create(leave(), manager)
    with pytest.raises(ValidationError) as exc:
        await leave_planner_service.update(record["id"], {"start_date": None}, manager)
    assert exc.value.message == "start_date cannot be null"
