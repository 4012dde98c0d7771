import pytest

from facilityops.auth.security import verify_password
from facilityops.core.errors import AppError, ForbiddenError
from facilityops.services.facility_service import derive_manager_password, facility_service

# Async tests
pytestmark = pytest.mark.asyncio


def facility_payload(**overrides):
    payload = {
        "site_name": "Green Meadows",
        "city": "Pune",
        "location": "Baner Road",
        "client_name": "Jane Roe",
        "position": "Owner",
        "contact_no": "+91 98765 43210",
        "email": "jane@example.com",
        "facility_type": "residential",
    }
    payload.update(overrides)
    return payload


async def test_derive_manager_password():
    assert derive_manager_password("Jane  Roe", "abcdef1234567890") == "janeroe@abcdef12"


async def test_onboarding_provisions_manager_and_catalogs(fake_db, admin):
    result = await facility_service.create_facility(facility_payload(), admin)

    facility = result["facility"]
    facility_id = facility["id"]
    assert facility_id in fake_db.collections["facilities"]
    assert len(facility["tenant_id"]) == 32

    credentials = result["manager_credentials"]
    assert credentials["email"] == "jane@example.com"
    assert credentials["password"] == f"janeroe@{facility['tenant_id'][:8]}"

    index = fake_db.collections["user_emails"]["jane@example.com"]
    manager = fake_db.collections["users"][index["user_id"]]
    assert manager["role"] == "facility_manager"
    assert manager["managed_facilities"] == [facility_id]
    assert verify_password(credentials["password"], manager["password_hash"])

    assert facility_id in fake_db.collections["service_management"]
    assert facility_id in fake_db.collections["iot_service_management"]
    assert "warnings" not in result


async def test_long_client_name_still_gets_a_working_password(fake_db, admin):
    client_name = "Shree Venkateshwara Cooperative Housing Society Residents Welfare Association Ltd"
    result = await facility_service.create_facility(facility_payload(client_name=client_name), admin)

    password = result["manager_credentials"]["password"]
    assert len(password.encode("utf-8")) > 72

    index = fake_db.collections["user_emails"]["jane@example.com"]
    manager = fake_db.collections["users"][index["user_id"]]
    assert verify_password(password, manager["password_hash"])
    assert not verify_password(password[:72], manager["password_hash"])


async def test_client_tenant_id_is_ignored(fake_db, admin):
    result = await facility_service.create_facility(facility_payload(tenant_id="mine"), admin)
    assert result["facility"]["tenant_id"] != "mine"


async def test_existing_email_attaches_facility(fake_db, admin):
    fake_db.seed("users", "user_9", {"email": "jane@example.com", "role": "facility_manager",
                                     "managed_facilities": ["fac_old"], "is_deleted": False})
    fake_db.seed("user_emails", "jane@example.com", {"user_id": "user_9", "email": "jane@example.com"})

    result = await facility_service.create_facility(facility_payload(), admin)

    assert "manager_credentials" not in result
    assert result["manager_assigned"] == {"user_id": "user_9", "email": "jane@example.com"}
    assert fake_db.collections["users"]["user_9"]["managed_facilities"] == ["fac_old", result["facility"]["id"]]
    assert len(fake_db.collections["users"]) == 1


async def test_failed_manager_write_rolls_back_facility(fake_db, admin):
    fake_db.fail_writes.add("users")

    with pytest.raises(AppError) as exc:
        await facility_service.create_facility(facility_payload(), admin)

    assert exc.value.message == "Failed to create facility"
    assert not fake_db.collections["facilities"]
    assert not fake_db.collections["user_emails"]


async def test_catalog_failure_is_reported_as_warning(fake_db, admin, monkeypatch):
    from facilityops.services.service_catalog_service import iot_catalog_service

    async def broken_initialize(*args, **kwargs):
        raise RuntimeError("quota exceeded")

    monkeypatch.setattr(iot_catalog_service, "initialize", broken_initialize)

    result = await facility_service.create_facility(facility_payload(), admin)

    assert result["facility"]["id"] in fake_db.collections["facilities"]
    assert len(result["warnings"]) == 1
    assert "IoT services" in result["warnings"][0]


async def test_onboarding_without_email_creates_no_account(fake_db, admin):
    result = await facility_service.create_facility(facility_payload(email=None), admin)
    assert "manager_credentials" not in result
    assert not fake_db.collections["users"]


async def test_bulk_create_reports_each_row(fake_db, admin):
    result = await facility_service.bulk_create(
        [facility_payload(email=None), {"site_name": "Missing everything"}], admin
    )
    assert result["created"] == 1
    assert result["failed"] == 1
    assert result["results"][1]["success"] is False


async def test_manager_only_sees_own_facilities(fake_db, facility, manager, outsider):
    fake_db.seed("facilities", "fac_2", {"site_name": "Elsewhere", "city": "Mumbai",
                                         "facility_type": "commercial"})

    listed = await facility_service.list_facilities(manager)
    assert [f["id"] for f in listed["facilities"]] == ["fac_1"]
    assert listed["pagination"]["total_count"] == 1

    with pytest.raises(ForbiddenError):
        await facility_service.get_facility("fac_1", outsider)


async def test_create_facility_route_returns_envelope(fake_db, admin):
    from facilityops.models.facility import FacilityCreate
    from facilityops.routers.facilities import create_facility

    result = await create_facility(FacilityCreate(**facility_payload()), current_user=admin)

    assert result["status"] == "success"
    assert result["data"]["facility"]["site_name"] == "Green Meadows"
    assert "manager_credentials" in result["data"]
