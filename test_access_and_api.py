import importlib
import logging

import pytest
from fastapi.testclient import TestClient

from facilityops.auth.access import can_access, resolve_create_facility, scope_filter_batches, scope_filters
from facilityops.auth.security import create_access_token
from facilityops.core.errors import ForbiddenError, ValidationError


@pytest.fixture
def client(fake_db, admin, manager):
    from facilityops.main import app

    fake_db.seed("users", "admin_1", {**admin, "is_deleted": False})
    fake_db.seed("users", "mgr_1", {**manager, "is_deleted": False})
    return TestClient(app)


FACILITY = {
    "site_name": "Lake View",
    "city": "Nagpur",
    "location": "Civil Lines",
    "client_name": "Arun Rao",
    "position": "Secretary",
    "contact_no": "0712-2540000",
    "email": "arun@example.com",
    "facility_type": "commercial",
}


def auth_header(user_id):
    return {"Authorization": f"Bearer {create_access_token({'id': user_id})}"}


def test_privileged_roles_reach_every_facility(admin, manager):
    assert can_access(admin, "fac_anything", "delete")
    assert can_access(manager, "fac_1", "update")
    assert not can_access(manager, "fac_2", "read")
    assert not can_access(manager, None, "read")


def test_resolve_create_facility(admin, manager):
    assert resolve_create_facility(manager, None) == "fac_1"
    assert resolve_create_facility(admin, "fac_7") == "fac_7"

    with pytest.raises(ValidationError):
        resolve_create_facility(admin, None)
    with pytest.raises(ForbiddenError):
        resolve_create_facility(manager, "fac_2")
    with pytest.raises(ValidationError):
        resolve_create_facility({"role": "supervisor", "managed_facilities": []}, None)


def test_scope_filters(admin, manager):
    assert scope_filters(admin) == []
    assert scope_filters(manager) == [("facility_id", "==", "fac_1")]
    assert scope_filters({"role": "supervisor", "managed_facilities": ["a", "b"]}) == [
        ("facility_id", "in", ["a", "b"])
    ]
    assert scope_filters({"role": "supervisor", "managed_facilities": []}) is None

    with pytest.raises(ForbiddenError):
        scope_filters(manager, "fac_2")


def test_scope_filter_batches(admin, manager):
    assert scope_filter_batches(admin) == [[]]
    assert scope_filter_batches(manager) == [[("facility_id", "==", "fac_1")]]
    assert scope_filter_batches({"role": "supervisor", "managed_facilities": []}) == []

    facilities = [f"fac_{n}" for n in range(61)]
    batches = scope_filter_batches({"role": "supervisor", "managed_facilities": facilities})
    assert [len(batch[0][2]) for batch in batches] == [30, 30, 1]
    assert [value for batch in batches for value in batch[0][2]] == facilities


def test_missing_facility_uses_error_envelope(client):
    response = client.get("/api/facilities/nope", headers=auth_header("admin_1"))

    assert response.status_code == 404
    assert response.json() == {"status": "error", "message": "Facility not found"}


def test_invalid_token_is_rejected(client):
    response = client.get("/api/facilities/", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401
    assert response.json()["status"] == "error"


def test_manager_cannot_onboard_facilities(client):
    response = client.post("/api/facilities/", json=FACILITY, headers=auth_header("mgr_1"))

    assert response.status_code == 403
    assert response.json()["message"] == "Insufficient permissions"


def test_body_validation_errors(client):
    response = client.post("/api/facilities/", json={"site_name": "Tower"}, headers=auth_header("admin_1"))

    body = response.json()
    assert response.status_code == 400
    assert body["message"] == "Validation failed"
    assert any(detail["field"] == "city" for detail in body["details"])


def test_onboarding_over_http(client, fake_db):
    response = client.post("/api/facilities/", json=FACILITY, headers=auth_header("admin_1"))

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "success"
    assert body["data"]["manager_credentials"]["email"] == "arun@example.com"
    assert len(fake_db.collections["facilities"]) == 1


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["failed_routers"] == 0


def test_config_exports_only_settings():
    from facilityops.core import config

    assert config.settings.ALGORITHM == "HS256"
    assert not hasattr(config, "SECRET_KEY")
    assert not hasattr(config, "ALGORITHM")


def test_startup_reports_firebase_success_once(monkeypatch, caplog):
    import facilityops.core.firebase_init as firebase_init
    import facilityops.main as main

    def initialize():
        firebase_init.logger.info("✅ Firebase initialized successfully")
        return True

    with monkeypatch.context() as patch:
        patch.setattr(firebase_init, "initialize_firebase", initialize)
        patch.setattr(firebase_init, "get_firebase_status", lambda: {"available": False})
        with caplog.at_level(logging.INFO):
            importlib.reload(main)
        messages = [r.getMessage() for r in caplog.records if "Firebase initialized" in r.getMessage()]
    importlib.reload(main)

    assert messages == ["✅ Firebase initialized successfully"]
