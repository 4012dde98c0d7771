import pytest

from facilityops.core.errors import ConflictError, NotFoundError, ValidationError
from facilityops.services.service_provider_service import service_provider_service

# Async tests
pytestmark = pytest.mark.asyncio


def provider_payload(**overrides):
    payload = {
        "provider_name": "CleanCo",
        "category": "Soft Services",
        "contact_person": "Meera Shah",
        "phone": "+91 90000 11111",
        "services": ["Deep cleaning", "Housekeeping"],
    }
    payload.update(overrides)
    return payload


async def test_create_applies_defaults(fake_db, facility, manager):
    provider = await service_provider_service.create(provider_payload(), manager)

    assert provider["facility_id"] == facility
    assert provider["contract_status"] == "Pending"
    assert provider["rating"] == 0
    assert provider["total_contracts"] == 0
    assert provider["is_active"] is True
    assert provider["provider_name_lower"] == "cleanco"


async def test_duplicate_name_in_category_conflicts(fake_db, facility, manager):
    await service_provider_service.create(provider_payload(), manager)

    with pytest.raises(ConflictError) as exc:
        await service_provider_service.create(provider_payload(provider_name="  cleanco "), manager)
    assert exc.value.status_code == 409

    other = await service_provider_service.create(provider_payload(category="Security"), manager)
    assert other["category"] == "Security"


async def test_unknown_facility(fake_db, admin):
    with pytest.raises(NotFoundError):
        await service_provider_service.create(provider_payload(facility_id="fac_missing"), admin)


async def test_contract_window_must_be_ordered(fake_db, facility, manager):
    with pytest.raises(ValidationError):
        await service_provider_service.create(provider_payload(
            contract_start_date="2026-06-01", contract_end_date="2026-01-01",
        ), manager)

    provider = await service_provider_service.create(provider_payload(
        contract_start_date="2026-01-01", contract_end_date="2026-12-31",
    ), manager)

    with pytest.raises(ValidationError):
        await service_provider_service.update(provider["id"], {"contract_end_date": "2025-12-01"}, manager)


async def test_search_and_active(fake_db, facility, manager):
    await service_provider_service.create(provider_payload(), manager)
    await service_provider_service.create(provider_payload(
        provider_name="VoltFix", category="Technical Services", services=["Electrical"],
        contract_status="Expired",
    ), manager)

    with pytest.raises(ValidationError):
        await service_provider_service.search(facility, "  ", manager)

    found = await service_provider_service.search(facility, "electrical", manager)
    assert [p["provider_name"] for p in found] == ["VoltFix"]

    active = await service_provider_service.active(facility, manager)
    assert [p["provider_name"] for p in active] == ["CleanCo"]


async def test_statistics(fake_db, facility, manager):
    await service_provider_service.create(provider_payload(rating=4), manager)
    await service_provider_service.create(provider_payload(provider_name="GuardAll", category="Security",
                                                           rating=3), manager)
    await service_provider_service.create(provider_payload(provider_name="NoRating", category="Statutory"),
                                          manager)

    stats = await service_provider_service.statistics(facility, manager)

    assert stats["total_providers"] == 3
    assert stats["active_providers"] == 3
    assert stats["by_category"] == {"Soft Services": 1, "Security": 1, "Statutory": 1}
    assert stats["by_contract_status"] == {"Pending": 3}
    assert stats["average_rating"] == 3.5


async def test_bulk_update_reports_failures(fake_db, facility, manager):
    provider = await service_provider_service.create(provider_payload(), manager)

    with pytest.raises(ValidationError):
        await service_provider_service.bulk_update(facility, [], manager)

    result = await service_provider_service.bulk_update(facility, [
        {"provider_id": provider["id"], "contract_status": "Active"},
        {"provider_id": "missing", "contract_status": "Active"},
    ], manager)

    assert result["updated"] == 1
    assert result["failed"] == 1
    assert fake_db.collections["service_providers"][provider["id"]]["contract_status"] == "Active"


async def test_manager_of_many_facilities_lists_every_batch(fake_db, facility):
    facilities = [f"fac_{n}" for n in range(1, 66)]
    busy_manager = {"id": "mgr_9", "email": "busy@example.com", "role": "facility_manager",
                    "managed_facilities": facilities}
    for facility_id in ("fac_1", "fac_31", "fac_65"):
        fake_db.seed("service_providers", f"sp_{facility_id}", {
            **provider_payload(provider_name=f"Vendor {facility_id}"),
            "facility_id": facility_id, "is_active": True, "is_deleted": False,
        })
    fake_db.seed("service_providers", "sp_other", {
        **provider_payload(provider_name="Elsewhere"), "facility_id": "fac_99", "is_deleted": False,
    })

    result = await service_provider_service.list(busy_manager, limit=100)

    assert sorted(p["id"] for p in result["service_providers"]) == ["sp_fac_1", "sp_fac_31", "sp_fac_65"]
