"""
Shared fixtures: an in-memory stand-in for ``DatabaseService`` installed on
every service singleton, plus a few actors.
"""

import copy
import itertools
from collections import defaultdict

import pytest

from facilityops.core.config import settings


# Same ceiling Firestore puts on in, not-in and array_contains_any
DISJUNCTIVE_OPS = ("in", "not-in", "array_contains_any")
DISJUNCTIVE_LIMIT = 30


def _matches(doc, field, op, value):
    present = field in doc
    actual = doc.get(field)
    if op == "==":
        return present and actual == value
    if op == "!=":
        return present and actual != value
    if op == "in":
        return present and actual in value
    if op == "not-in":
        return present and actual not in value
    if op == "array_contains":
        return isinstance(actual, list) and value in actual
    if op == "array_contains_any":
        return isinstance(actual, list) and any(item in actual for item in value)
    if not present or actual is None:
        return False
    if op == "<":
        return actual < value
    if op == "<=":
        return actual <= value
    if op == ">":
        return actual > value
    if op == ">=":
        return actual >= value
    raise ValueError(f"Unsupported operator {op}")


class InMemoryScope:
    def __init__(self, db):
        self._db = db

    def new_id(self, collection):
        return self._db.new_id(collection)

    def get(self, collection, document_id):
        return self._db.read(collection, document_id)

    def query(self, collection, filters=None):
        return self._db.select(collection, filters)

    def set(self, collection, document_id, data):
        self._db.write(collection, document_id, data)

    def update(self, collection, document_id, data):
        if document_id not in self._db.collections[collection]:
            raise KeyError(f"No document to update: {collection}/{document_id}")
        self._db.write(collection, document_id, data, merge=True)

    def delete(self, collection, document_id):
        self._db.collections[collection].pop(document_id, None)


class InMemoryDatabase:
    """Dict-backed DatabaseService with the same tuple contract."""

    def __init__(self):
        self.collections = defaultdict(dict)
        self.fail_writes = set()
        self._ids = itertools.count(1)

    # ----- raw helpers (also used by tests to seed and inspect) -----

    def new_id(self, collection):
        return f"{collection}_{next(self._ids)}"

    def seed(self, collection, document_id, data):
        self.collections[collection][document_id] = copy.deepcopy({k: v for k, v in data.items() if k != "id"})
        return document_id

    def read(self, collection, document_id):
        doc = self.collections[collection].get(document_id)
        if doc is None:
            return None
        return {**copy.deepcopy(doc), "id": document_id}

    def select(self, collection, filters=None, limit=None):
        results = []
        for document_id, doc in self.collections[collection].items():
            if all(_matches(doc, field, op, value) for field, op, value in filters or []):
                results.append({**copy.deepcopy(doc), "id": document_id})
        return results[:limit] if limit else results

    def write(self, collection, document_id, data, merge=False):
        if collection in self.fail_writes:
            raise RuntimeError(f"forced write failure on {collection}")
        body = copy.deepcopy({k: v for k, v in data.items() if k != "id"})
        if merge:
            self.collections[collection][document_id].update(body)
        else:
            self.collections[collection][document_id] = body

    # ----- DatabaseService contract -----

    async def create_document(self, collection, data, document_id=None, validate=True):
        document_id = document_id or self.new_id(collection)
        try:
            self.write(collection, document_id, data)
        except RuntimeError as e:
            return False, None, str(e)
        return True, document_id, None

    async def get_document(self, collection, document_id):
        return True, self.read(collection, document_id), None

    async def query_documents(self, collection, filters=None, limit=None):
        for field, op, value in filters or []:
            if op in DISJUNCTIVE_OPS and len(value) > DISJUNCTIVE_LIMIT:
                return False, None, f"400 '{op}' filters support a maximum of {DISJUNCTIVE_LIMIT} elements"
        return True, self.select(collection, filters, limit), None

    async def update_document(self, collection, document_id, data):
        if document_id not in self.collections[collection]:
            return False, f"No document to update: {collection}/{document_id}"
        try:
            self.write(collection, document_id, data, merge=True)
        except RuntimeError as e:
            return False, str(e)
        return True, None

    async def delete_document(self, collection, document_id):
        self.collections[collection].pop(document_id, None)
        return True, None

    async def run_transaction(self, operation):
        snapshot = copy.deepcopy(self.collections)
        try:
            return operation(InMemoryScope(self))
        except Exception:
            self.collections = snapshot
            raise


@pytest.fixture
def fake_db(monkeypatch):
    import facilityops.auth.dependencies as dependencies
    from facilityops.services.daily_checklist_service import daily_checklist_service
    from facilityops.services.employee_service import employee_service
    from facilityops.services.facility_service import facility_service
    from facilityops.services.floor_location_service import floor_location_service
    from facilityops.services.hygiene_checklist_service import hygiene_checklist_service
    from facilityops.services.hygiene_section_service import hygiene_section_service
    from facilityops.services.power_management_service import power_management_service
    from facilityops.services.quality_management_service import (
        ro_plant_service,
        stp_service,
        swimming_pool_service,
        wtp_service,
    )
    from facilityops.services.service_catalog_service import iot_catalog_service, service_catalog_service
    from facilityops.services.service_provider_service import service_provider_service
    from facilityops.services.staff_scheduling_service import (
        leave_planner_service,
        roster_service,
        shift_schedule_service,
        weekoff_planner_service,
    )
    from facilityops.services.water_management_service import (
        borewell_service,
        cauvery_supply_service,
        tanker_service,
        water_tank_service,
    )

    db = InMemoryDatabase()
    for service in (
        daily_checklist_service, employee_service, facility_service, floor_location_service,
        hygiene_checklist_service, hygiene_section_service, power_management_service,
        iot_catalog_service, service_catalog_service, service_provider_service,
        leave_planner_service, roster_service, shift_schedule_service, weekoff_planner_service,
        water_tank_service, borewell_service, cauvery_supply_service, tanker_service,
        stp_service, wtp_service, swimming_pool_service, ro_plant_service,
    ):
        monkeypatch.setattr(service, "db", db)
    monkeypatch.setattr(dependencies, "database_service", db)
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 4)
    return db


@pytest.fixture
def facility(fake_db):
    fake_db.seed("facilities", "fac_1", {
        "tenant_id": "a" * 32,
        "site_name": "Tower A",
        "city": "Pune",
        "location": "Baner",
        "client_name": "Jane Roe",
        "position": "Owner",
        "contact_no": "+91 98765 43210",
        "facility_type": "residential",
    })
    return "fac_1"


@pytest.fixture
def admin():
    return {"id": "admin_1", "email": "root@example.com", "role": "super_admin",
            "status": "active", "managed_facilities": []}


@pytest.fixture
def manager():
    return {"id": "mgr_1", "email": "mgr@example.com", "role": "facility_manager",
            "status": "active", "managed_facilities": ["fac_1"]}


@pytest.fixture
def outsider():
    return {"id": "mgr_2", "email": "other@example.com", "role": "facility_manager",
            "status": "active", "managed_facilities": ["fac_2"]}
