import pytest

from facilityops.auth.security import get_password_hash, verify_password
from facilityops.core.errors import DuplicateError, ForbiddenError, NotFoundError, ValidationError
from facilityops.services.employee_service import employee_service

# Async tests
pytestmark = pytest.mark.asyncio


def employee_payload(**overrides):
    payload = {
        "email": "Ravi.K@Example.com",
        "password": "s3cretpass",
        "first_name": "Ravi",
        "last_name": "Kumar",
        "role": "housekeeping",
        "profile": {"employee_id": "HK-001", "department": "Housekeeping"},
        "managed_facilities": ["fac_999"],
    }
    payload.update(overrides)
    return payload


async def test_employee_inherits_creator_facilities(fake_db, manager):
    employee = await employee_service.create(employee_payload(), manager)

    assert employee["email"] == "ravi.k@example.com"
    assert employee["managed_facilities"] == ["fac_1"]
    assert employee["status"] == "active"
    assert employee["verification_status"] == "pending"
    assert employee["profile"]["employment_status"] == "active"
    assert "password_hash" not in employee
    assert fake_db.collections["user_emails"]["ravi.k@example.com"]["user_id"] == employee["id"]


async def test_admin_roles_cannot_be_created(fake_db, manager):
    with pytest.raises(ForbiddenError) as exc:
        await employee_service.create(employee_payload(role="admin"), manager)

    assert exc.value.status_code == 403
    assert not fake_db.collections["users"]


async def test_duplicate_email_is_rejected(fake_db, manager):
    await employee_service.create(employee_payload(), manager)

    with pytest.raises(DuplicateError) as exc:
        await employee_service.create(employee_payload(email="ravi.k@example.com"), manager)

    assert exc.value.message == "Employee with this email already exists"
    assert len(fake_db.collections["users"]) == 1


async def test_list_is_limited_to_shared_facilities(fake_db, manager, outsider):
    await employee_service.create(employee_payload(), manager)
    await employee_service.create(employee_payload(email="other@site.com", first_name="Asha"), outsider)

    listed = await employee_service.list_employees(manager)
    assert [e["first_name"] for e in listed["employees"]] == ["Ravi"]

    found = await employee_service.list_employees(manager, search="hk-001")
    assert found["pagination"]["total_count"] == 1


async def test_outsider_cannot_load_employee(fake_db, manager, outsider):
    employee = await employee_service.create(employee_payload(), manager)

    with pytest.raises(NotFoundError):
        await employee_service.get(employee["id"], outsider)


async def test_role_update_rejects_admin_tier(fake_db, manager):
    employee = await employee_service.create(employee_payload(), manager)

    with pytest.raises(ValidationError):
        await employee_service.update_role(employee["id"], "super_admin", manager)

    updated = await employee_service.update_role(employee["id"], "technician", manager)
    assert updated["role"] == "technician"


async def test_email_change_moves_index(fake_db, manager):
    employee = await employee_service.create(employee_payload(), manager)

    updated = await employee_service.update(employee["id"], {"email": "ravi@new.com"}, manager)

    assert updated["email"] == "ravi@new.com"
    assert "ravi.k@example.com" not in fake_db.collections["user_emails"]
    assert fake_db.collections["user_emails"]["ravi@new.com"]["user_id"] == employee["id"]
    assert fake_db.collections["users"][employee["id"]]["email"] == "ravi@new.com"


async def test_future_exit_date_is_rejected(fake_db, manager):
    employee = await employee_service.create(employee_payload(), manager)

    with pytest.raises(ValidationError) as exc:
        await employee_service.delete(employee["id"], "2999-01-01", "Relocating", manager)

    assert exc.value.message == "Exit date cannot be in the future"


async def test_exit_and_restore(fake_db, manager):
    employee = await employee_service.create(employee_payload(), manager)

    exited = await employee_service.delete(employee["id"], "2024-03-31", "Relocating", manager)
    assert exited["is_deleted"] is True
    assert exited["status"] == "inactive"

    details = await employee_service.exit_details(employee["id"], manager)
    assert details["exit_date"] == "2024-03-31"
    assert details["exit_reason"] == "Relocating"

    with pytest.raises(NotFoundError):
        await employee_service.get(employee["id"], manager)

    restored = await employee_service.restore(employee["id"], manager)
    assert restored["is_deleted"] is False
    assert restored["status"] == "active"
    assert restored["profile"]["employment_status"] == "active"

    with pytest.raises(NotFoundError):
        await employee_service.restore(employee["id"], manager)


async def test_exit_details_of_current_employee(fake_db, manager):
    employee = await employee_service.create(employee_payload(), manager)

    with pytest.raises(ValidationError):
        await employee_service.exit_details(employee["id"], manager)


async def test_change_password(fake_db, manager):
    fake_db.seed("users", "mgr_1", {**manager, "password_hash": get_password_hash("old-password")})

    with pytest.raises(ValidationError):
        await employee_service.change_password(manager, "wrong", "new-password")

    await employee_service.change_password(manager, "old-password", "new-password")
    assert verify_password("new-password", fake_db.collections["users"]["mgr_1"]["password_hash"])


async def test_passwords_past_bcrypt_limit(fake_db, manager):
    long_password = "x" * 80
    employee = await employee_service.create(employee_payload(password=long_password), manager)

    stored = fake_db.collections["users"][employee["id"]]["password_hash"]
    assert verify_password(long_password, stored)
    assert not verify_password("x" * 79, stored)

    fake_db.seed("users", "mgr_1", {**manager, "password_hash": get_password_hash("old-password")})
    await employee_service.change_password(manager, "old-password", "é" * 40)
    assert verify_password("é" * 40, fake_db.collections["users"]["mgr_1"]["password_hash"])
