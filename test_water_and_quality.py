import pytest
from pydantic import ValidationError as PydanticValidationError

from facilityops.core.errors import ForbiddenError, ValidationError
from facilityops.models.quality import STPReadingCreate, SwimmingPoolReadingCreate
from facilityops.models.water import TankType
from facilityops.services.quality_management_service import (
    ro_plant_service,
    stp_service,
    swimming_pool_service,
)
from facilityops.services.water_management_service import tanker_service, water_tank_service

# Async tests
pytestmark = pytest.mark.asyncio


async def test_tanker_total_is_derived(fake_db, facility, manager):
    tanker = await tanker_service.create(
        {"total_tankers": 4, "tanker_capacity": 12.5, "total_water_supplied": 999}, manager
    )

    assert tanker["total_water_supplied"] == 50
    assert tanker["status"] == "active"
    assert tanker["facility_id"] == facility

    tanker = await tanker_service.update(tanker["id"], {"total_tankers": 6}, manager)
    assert tanker["total_water_supplied"] == 75

    tanker = await tanker_service.update(tanker["id"], {"status": "inactive", "total_water_supplied": 1}, manager)
    assert fake_db.collections["tankers"][tanker["id"]]["total_water_supplied"] == 75


async def test_water_tanks_filter_and_scope(fake_db, facility, manager, outsider):
    await water_tank_service.create({"tank_name": "OHT 1", "location": "Block A roof", "capacity": 50,
                                     "type": "overhead"}, manager)
    sump = await water_tank_service.create({"tank_name": "Sump", "location": "Basement", "capacity": 200,
                                            "type": "underground"}, manager)

    result = await water_tank_service.list(manager, filters=water_tank_service.equality_filters(
        type=TankType.UNDERGROUND.value))
    assert [tank["id"] for tank in result["water_tanks"]] == [sump["id"]]
    assert result["pagination"]["total_count"] == 1

    with pytest.raises(ForbiddenError):
        await water_tank_service.get(sump["id"], outsider)
    assert (await water_tank_service.list(outsider))["water_tanks"] == []


async def test_stp_reading_defaults_and_range_flag(fake_db, facility, manager):
    reading = await stp_service.create({"mlss": 3200}, manager)

    assert reading["mlss_normal_range_min"] == 2000
    assert reading["mlss_normal_range_max"] == 4000
    assert reading["backwash"] == "OFF"
    assert reading["within_normal_range"] is True

    reading = await stp_service.update(reading["id"], {"mlss": 4500}, manager)
    assert reading["within_normal_range"] is False

    reading = await stp_service.update(reading["id"], {"mlss_normal_range_max": 5000}, manager)
    assert reading["within_normal_range"] is True

    with pytest.raises(ValidationError) as exc:
        await stp_service.update(reading["id"], {"mlss_normal_range_min": 6000}, manager)
    assert exc.value.message == "mlss normal range minimum cannot exceed its maximum"


async def test_swimming_pool_checks_ph_and_chlorine(fake_db, facility, manager):
    with pytest.raises(PydanticValidationError):
        SwimmingPoolReadingCreate(ph_level=15, chlorine=2)
    with pytest.raises(PydanticValidationError):
        STPReadingCreate(mlss=3000, mlss_normal_range_min=5000)

    good = await swimming_pool_service.create({"ph_level": 7.4, "chlorine": 2}, manager)
    low_chlorine = await swimming_pool_service.create({"ph_level": 7.4, "chlorine": 0.4}, manager)

    assert good["within_normal_range"] is True
    assert low_chlorine["within_normal_range"] is False

    flagged = await swimming_pool_service.list(manager, filters=[("within_normal_range", "==", False)])
    assert [r["id"] for r in flagged["swimming_pool_readings"]] == [low_chlorine["id"]]


async def test_plants_without_ranges_are_not_flagged(fake_db, facility, manager):
    reading = await ro_plant_service.create({"input_tds": 900, "output_tds": 60, "usage_point_hardness": 40},
                                            manager)

    assert reading["regeneration"] == "OFF"
    assert reading["regen_water_flow"] == 0
    assert "within_normal_range" not in reading


async def test_out_of_range_list_route(fake_db, facility, manager):
    from facilityops.routers.quality_management import list_stp_readings

    await stp_service.create({"mlss": 3000}, manager)
    high = await stp_service.create({"mlss": 9000}, manager)

    result = await list_stp_readings(facility_id=None, status=None, within_normal_range=False,
                                     page=1, limit=10, current_user=manager)

    assert result["status"] == "success"
    assert [r["id"] for r in result["data"]["stp_readings"]] == [high["id"]]
