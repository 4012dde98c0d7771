import itertools
import re

import pytest

from facilityops.core.errors import DuplicateError, ForbiddenError, NotFoundError, ValidationError
from facilityops.models.hygiene import ChecklistStatus, derive_overall_status
from facilityops.services.daily_checklist_service import daily_checklist_service
from facilityops.services.floor_location_service import floor_location_service, generate_qr_code

# Async tests
pytestmark = pytest.mark.asyncio

TODAY = "2026-10-19"


@pytest.fixture
def floor(fake_db, facility):
    fake_db.seed("floor_locations", "floor_1", {
        "facility_id": facility, "floor_name": "Ground Floor", "floor_number": 0,
        "qr_code": "FL_fac_1_0_ABCDEF12", "is_active": True, "is_deleted": False,
    })
    return "floor_1"


@pytest.fixture
def section(fake_db, facility):
    fake_db.seed("hygiene_sections", "section_1", {
        "facility_id": facility, "section_name": "Housekeeping", "is_active": True, "is_deleted": False,
    })
    return "section_1"


def checklist_payload(floor, section, items=3, **overrides):
    payload = {
        "hygiene_section_id": section,
        "floor_location_id": floor,
        "checklist_date": TODAY,
        "checklist_items": [{"item_name": f"Task {n}"} for n in range(items)],
        "assigned_department": "HOUSEKEEPING",
    }
    payload.update(overrides)
    return payload


async def test_new_checklist_is_pending(fake_db, floor, section, manager):
    checklist = await daily_checklist_service.create(checklist_payload(floor, section), manager)

    assert checklist["facility_id"] == "fac_1"
    assert checklist["overall_status"] == "PENDING"
    assert checklist["total_items"] == 3
    assert checklist["completed_items"] == 0


async def test_duplicate_checklist_for_same_day_is_rejected(fake_db, floor, section, manager):
    await daily_checklist_service.create(checklist_payload(floor, section), manager)

    with pytest.raises(DuplicateError) as exc:
        await daily_checklist_service.create(checklist_payload(floor, section), manager)

    assert exc.value.status_code == 400
    assert len(fake_db.collections["daily_checklists"]) == 1


async def test_floor_from_other_facility_is_invalid(fake_db, floor, section, manager):
    fake_db.seed("floor_locations", "floor_x", {
        "facility_id": "fac_2", "floor_name": "Roof", "floor_number": 9,
        "qr_code": "FL_fac_2_9_00000000", "is_active": True, "is_deleted": False,
    })

    with pytest.raises(ValidationError) as exc:
        await daily_checklist_service.create(checklist_payload("floor_x", section), manager)

    assert exc.value.message == "Invalid floor location"


@pytest.mark.parametrize("order", list(itertools.permutations(range(3))))
async def test_any_completion_order_ends_completed(fake_db, floor, section, manager, order):
    checklist = await daily_checklist_service.create(checklist_payload(floor, section), manager)

    statuses = []
    for index in order:
        checklist = await daily_checklist_service.complete_item(checklist["id"], index, manager)
        statuses.append(checklist["overall_status"])

    assert statuses == ["IN_PROGRESS", "IN_PROGRESS", "COMPLETED"]
    assert checklist["completed_items"] == 3
    assert checklist["started_at"] is not None


async def test_first_finisher_keeps_completed_by(fake_db, floor, section, manager, admin):
    checklist = await daily_checklist_service.create(checklist_payload(floor, section, items=1), manager)

    await daily_checklist_service.complete_item(checklist["id"], 0, manager)
    checklist = await daily_checklist_service.complete_item(checklist["id"], 0, admin, notes="rechecked")

    assert checklist["completed_by"] == "mgr_1"
    assert checklist["checklist_items"][0]["completed_by"] == "admin_1"
    assert checklist["checklist_items"][0]["notes"] == "rechecked"


async def test_invalid_item_index(fake_db, floor, section, manager):
    checklist = await daily_checklist_service.create(checklist_payload(floor, section), manager)

    with pytest.raises(ValidationError) as exc:
        await daily_checklist_service.complete_item(checklist["id"], 3, manager)

    assert exc.value.message == "Invalid item index"


async def test_verification_rules(fake_db, floor, section, manager):
    checklist = await daily_checklist_service.create(checklist_payload(floor, section, items=1), manager)

    with pytest.raises(ValidationError) as exc:
        await daily_checklist_service.verify(checklist["id"], manager)
    assert exc.value.message == "Only completed checklists can be verified"

    await daily_checklist_service.complete_item(checklist["id"], 0, manager)
    checklist = await daily_checklist_service.verify(checklist["id"], manager)
    assert checklist["overall_status"] == "VERIFIED"
    assert checklist["verified_by"] == "mgr_1"

    with pytest.raises(ValidationError) as exc:
        await daily_checklist_service.verify(checklist["id"], manager)
    assert exc.value.message == "Checklist already verified"


async def test_outsider_cannot_complete_items(fake_db, floor, section, manager, outsider):
    checklist = await daily_checklist_service.create(checklist_payload(floor, section), manager)

    with pytest.raises(ForbiddenError):
        await daily_checklist_service.complete_item(checklist["id"], 0, outsider)


async def test_qr_lookup(fake_db, floor, section, manager):
    empty = await daily_checklist_service.get_by_qr("FL_fac_1_0_ABCDEF12", manager, TODAY)
    assert empty["daily_checklists"] == []
    assert empty["floor_location"]["id"] == floor

    await daily_checklist_service.create(checklist_payload(floor, section), manager)
    found = await daily_checklist_service.get_by_qr("FL_fac_1_0_ABCDEF12", manager, TODAY)
    assert len(found["daily_checklists"]) == 1


async def test_qr_of_inactive_floor_is_not_found(fake_db, floor, manager):
    fake_db.collections["floor_locations"][floor]["is_active"] = False

    with pytest.raises(NotFoundError) as exc:
        await daily_checklist_service.get_by_qr("FL_fac_1_0_ABCDEF12", manager, TODAY)

    assert exc.value.message == "Invalid QR code or floor location not found"


async def test_qr_of_deleted_floor_is_not_found(fake_db, floor, section, manager):
    await daily_checklist_service.create(checklist_payload(floor, section), manager)
    await floor_location_service.delete(floor, manager)
    fake_db.collections["floor_locations"][floor]["is_active"] = True

    with pytest.raises(NotFoundError) as exc:
        await daily_checklist_service.get_by_qr("FL_fac_1_0_ABCDEF12", manager, TODAY)

    assert exc.value.message == "Invalid QR code or floor location not found"


async def test_in_progress_checklist_cannot_be_verified(fake_db, floor, section, manager):
    checklist = await daily_checklist_service.create(checklist_payload(floor, section, items=2), manager)
    checklist = await daily_checklist_service.complete_item(checklist["id"], 1, manager)
    assert checklist["overall_status"] == "IN_PROGRESS"

    with pytest.raises(ValidationError) as exc:
        await daily_checklist_service.verify(checklist["id"], manager)

    assert exc.value.message == "Only completed checklists can be verified"
    assert fake_db.collections["daily_checklists"][checklist["id"]]["overall_status"] == "IN_PROGRESS"


async def test_stats_group_by_status_and_department(fake_db, floor, section, manager):
    checklist = await daily_checklist_service.create(checklist_payload(floor, section, items=2), manager)
    await daily_checklist_service.complete_item(checklist["id"], 0, manager)

    stats = await daily_checklist_service.stats(manager, "fac_1")

    assert stats["total_checklists"] == 1
    in_progress = next(s for s in stats["overall_stats"] if s["status"] == "IN_PROGRESS")
    assert in_progress == {"status": "IN_PROGRESS", "count": 1, "total_items": 2, "completed_items": 1}
    assert stats["department_stats"][0]["department"] == "HOUSEKEEPING"
    assert stats["department_stats"][0]["in_progress"] == 1


async def test_checklist_without_items_is_pending():
    assert derive_overall_status([]) == ChecklistStatus.PENDING
    assert derive_overall_status([], verified=True) == ChecklistStatus.PENDING


async def test_floor_qr_code_format_and_unique_floor(fake_db, facility, manager):
    assert re.match(r"^FL_fac_1_2_[0-9A-F]{8}$", generate_qr_code("fac_1", 2))

    location = await floor_location_service.create({"floor_name": "Floor 2", "floor_number": 2}, manager)
    assert re.match(r"^FL_fac_1_2_[0-9A-F]{8}$", location["qr_code"])

    with pytest.raises(DuplicateError):
        await floor_location_service.create({"floor_name": "Second", "floor_number": 2}, manager)


async def test_complete_item_route_without_body(fake_db, floor, section, manager):
    from facilityops.routers.daily_checklists import complete_checklist_item

    checklist = await daily_checklist_service.create(checklist_payload(floor, section, items=1), manager)

    result = await complete_checklist_item(checklist_id=checklist["id"], item_index=0,
                                           payload=None, current_user=manager)

    assert result["status"] == "success"
    assert result["data"]["overall_status"] == "COMPLETED"
