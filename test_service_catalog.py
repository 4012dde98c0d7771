import asyncio

import pytest

from facilityops.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from facilityops.services.service_catalog_service import iot_catalog_service, service_catalog_service

# Async tests
pytestmark = pytest.mark.asyncio


async def test_default_catalog_counters(fake_db, facility, manager):
    catalog = await service_catalog_service.get_or_initialize(facility, manager)

    assert catalog["total_services_available"] == 18
    assert catalog["total_services_active"] == 0
    assert [cat["category"] for cat in catalog["service_categories"]] == [
        "Soft Services", "Technical Services", "AMC Services",
    ]
    assert [cat["total_count"] for cat in catalog["service_categories"]] == [3, 7, 8]


async def test_activating_services_updates_counters(fake_db, facility, manager):
    await service_catalog_service.get_or_initialize(facility, manager)

    catalog = await service_catalog_service.update_service_status(
        facility, "Technical Services", "Plumbing", True, manager
    )

    technical = next(cat for cat in catalog["service_categories"] if cat["category"] == "Technical Services")
    assert technical["active_count"] == 1
    assert catalog["total_services_active"] == 1

    stats = await service_catalog_service.statistics(facility, manager)
    assert stats["active_services"] == 1
    assert stats["inactive_services"] == 17


async def test_iot_enabled_follows_active_services(fake_db, facility, manager):
    catalog = await iot_catalog_service.get_or_initialize(facility, manager)
    assert catalog["total_services_available"] == 18
    assert catalog["iot_enabled"] is False

    catalog = await iot_catalog_service.update_service_status(
        facility, "Water Management", "Leak Detection", True, manager
    )
    assert catalog["iot_enabled"] is True

    catalog = await iot_catalog_service.update_service_status(
        facility, "Water Management", "Leak Detection", False, manager
    )
    assert catalog["iot_enabled"] is False


async def test_concurrent_first_reads_create_one_catalog(fake_db, facility, manager, monkeypatch):
    read_document = fake_db.get_document
    write_document = fake_db.write
    catalog_writes = []

    async def slow_read(collection, document_id):
        # Both callers see the catalog as missing before either writes
        result = await read_document(collection, document_id)
        await asyncio.sleep(0)
        return result

    def counting_write(collection, document_id, data, merge=False):
        if collection == "service_management":
            catalog_writes.append(document_id)
        write_document(collection, document_id, data, merge=merge)

    monkeypatch.setattr(fake_db, "get_document", slow_read)
    monkeypatch.setattr(fake_db, "write", counting_write)

    first, second = await asyncio.gather(
        service_catalog_service.get_or_initialize(facility, manager),
        service_catalog_service.get_or_initialize(facility, manager),
    )

    assert first["facility_id"] == second["facility_id"] == facility
    assert first["created_at"] == second["created_at"]
    assert catalog_writes == [facility]
    assert list(fake_db.collections["service_management"]) == [facility]


async def test_explicit_initialize_twice_conflicts(fake_db, facility, admin):
    await service_catalog_service.initialize_for_facility(facility, admin)

    with pytest.raises(ConflictError) as exc:
        await service_catalog_service.initialize_for_facility(facility, admin)

    assert exc.value.status_code == 409


async def test_bulk_update_skips_unknown_services(fake_db, facility, manager):
    await service_catalog_service.get_or_initialize(facility, manager)

    catalog = await service_catalog_service.bulk_update(facility, [
        {"category": "Soft Services", "service_name": "Housekeeping", "is_active": True},
        {"category": "Soft Services", "service_name": "Window Washing", "is_active": True},
    ], manager)

    assert catalog["total_services_active"] == 1


async def test_bulk_update_rejects_empty_list(fake_db, facility, manager):
    with pytest.raises(ValidationError):
        await service_catalog_service.bulk_update(facility, [], manager)


async def test_bulk_update_rejects_unknown_category(fake_db, facility, manager):
    await service_catalog_service.get_or_initialize(facility, manager)

    with pytest.raises(ValidationError):
        await service_catalog_service.bulk_update(facility, [
            {"category": "Soft Services", "service_name": "Housekeeping", "is_active": True},
            {"category": "Catering", "service_name": "Lunch", "is_active": True},
        ], manager)

    stats = await service_catalog_service.statistics(facility, manager)
    assert stats["active_services"] == 0


async def test_add_and_remove_service(fake_db, facility, manager):
    await service_catalog_service.get_or_initialize(facility, manager)

    catalog = await service_catalog_service.add_service(
        facility, {"category": "AMC Services", "name": "Solar Panels", "is_active": True}, manager
    )
    assert catalog["total_services_available"] == 19
    assert catalog["total_services_active"] == 1

    catalog = await service_catalog_service.remove_service(facility, "AMC Services", "Solar Panels", manager)
    assert catalog["total_services_available"] == 18
    assert catalog["total_services_active"] == 0


async def test_soft_deleted_catalog_is_not_found(fake_db, facility, admin):
    await service_catalog_service.initialize_for_facility(facility, admin)
    await service_catalog_service.delete(facility, admin)

    with pytest.raises(NotFoundError):
        await service_catalog_service.statistics(facility, admin)


async def test_outsider_cannot_read_catalog(fake_db, facility, outsider):
    with pytest.raises(ForbiddenError):
        await service_catalog_service.get_or_initialize(facility, outsider)
