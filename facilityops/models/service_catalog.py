"""
Per-facility service catalogs (regular and IoT).

A catalog document nests categories and their service entries and carries
counters derived from them. ``ServiceCatalog`` is the only thing that
mutates a catalog, and it recomputes every counter after each mutation.
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, Field

from ..core.errors import DuplicateError, NotFoundError, ValidationError

# --------------------------------------------------------------------------
# Enums
# --------------------------------------------------------------------------

class ServiceCategory(str, Enum):
    SOFT_SERVICES      = "Soft Services"
    TECHNICAL_SERVICES = "Technical Services"
    AMC_SERVICES       = "AMC Services"


class IoTServiceCategory(str, Enum):
    ATTENDANCE_MANAGEMENT     = "Attendance Management"
    HK_GARDEN_PEST_MONITORING = "HK/Garden/Pest Monitoring"
    ASSETS_MANAGEMENT         = "Assets Management"
    WATER_MANAGEMENT          = "Water Management"
    POWER_MANAGEMENT          = "Power Management"
    COMPLAINT_MANAGEMENT      = "Complaint Management"


class IoTServiceStatus(str, Enum):
    THIRD_PARTY_INTEGRATION_READY = "Third-party Integration Ready"
    IOT_ENABLED                   = "IoT Enabled"
    SETUP_REQUIRED                = "Setup Required"
    ACTIVE_MONITORING             = "Active Monitoring"
    REAL_TIME_DATA                = "Real-time Data"
    THIRD_PARTY_READY             = "Third-party Ready"


# --------------------------------------------------------------------------
# Default tables
# --------------------------------------------------------------------------

def _professional(*names: str) -> List[Dict[str, Any]]:
    return [
        {"name": name, "description": f"Professional {name.lower()} services for your facility"}
        for name in names
    ]


DEFAULT_SERVICES: Dict[str, List[Dict[str, Any]]] = {
    ServiceCategory.SOFT_SERVICES.value: _professional(
        "Housekeeping", "Gardening", "Pest Control",
    ),
    ServiceCategory.TECHNICAL_SERVICES.value: _professional(
        "Electrical", "Plumbing", "STP", "WTP", "Swimming Pool", "HVAC", "Firehydrant system",
    ),
    ServiceCategory.AMC_SERVICES.value: _professional(
        "Lifts", "DGs", "Transformers", "HNS pumps", "Tank cleaning", "Fire extinguisher", "CCTV", "Gym",
    ),
}


def _iot(name: str, description: str, status: IoTServiceStatus, features: List[str]) -> Dict[str, Any]:
    return {"name": name, "description": description, "status": status.value, "features": features}


DEFAULT_IOT_SERVICES: Dict[str, List[Dict[str, Any]]] = {
    IoTServiceCategory.ATTENDANCE_MANAGEMENT.value: [
        _iot("Biometric System",
             "Enable IoT devices and integrations for automated service management and monitoring",
             IoTServiceStatus.THIRD_PARTY_INTEGRATION_READY,
             ["Fingerprint scanning", "Real-time attendance", "Access control"]),
        _iot("Face Check-in", "Facial recognition based attendance system",
             IoTServiceStatus.IOT_ENABLED,
             ["Face detection", "Anti-spoofing", "Temperature screening"]),
        _iot("RFID Cards", "RFID card based access and attendance tracking",
             IoTServiceStatus.SETUP_REQUIRED,
             ["Card scanning", "Access management", "Visitor tracking"]),
    ],
    IoTServiceCategory.HK_GARDEN_PEST_MONITORING.value: [
        _iot("QR Code Scanning", "QR code based task verification and tracking",
             IoTServiceStatus.IOT_ENABLED,
             ["Task verification", "Location tracking", "Progress monitoring"]),
        _iot("Task Tracking", "Real-time monitoring of housekeeping and maintenance tasks",
             IoTServiceStatus.IOT_ENABLED,
             ["Real-time updates", "Task assignment", "Completion tracking"]),
        _iot("Schedule Automation", "Automated scheduling for maintenance and cleaning tasks",
             IoTServiceStatus.SETUP_REQUIRED,
             ["Auto scheduling", "Resource optimization", "Alert notifications"]),
    ],
    IoTServiceCategory.ASSETS_MANAGEMENT.value: [
        _iot("Asset Tagging", "Digital tagging and tracking of facility assets",
             IoTServiceStatus.SETUP_REQUIRED,
             ["Digital tags", "Asset registry", "Lifecycle tracking"]),
        _iot("RFID Tracking", "RFID based asset location and movement tracking",
             IoTServiceStatus.SETUP_REQUIRED,
             ["Location tracking", "Movement alerts", "Inventory management"]),
        _iot("Maintenance Alerts", "Automated maintenance scheduling and alerts",
             IoTServiceStatus.IOT_ENABLED,
             ["Predictive maintenance", "Alert system", "Service scheduling"]),
    ],
    IoTServiceCategory.WATER_MANAGEMENT.value: [
        _iot("Smart Water Meters", "IoT enabled water consumption monitoring",
             IoTServiceStatus.IOT_ENABLED,
             ["Real-time monitoring", "Consumption analytics", "Leak detection"]),
        _iot("Level Sensors", "Water tank level monitoring with IoT sensors",
             IoTServiceStatus.SETUP_REQUIRED,
             ["Level monitoring", "Overflow protection", "Automated alerts"]),
        _iot("Leak Detection", "IoT based water leak detection and prevention",
             IoTServiceStatus.ACTIVE_MONITORING,
             ["Early detection", "Automated shutoff", "Damage prevention"]),
    ],
    IoTServiceCategory.POWER_MANAGEMENT.value: [
        _iot("Smart Power Meters", "Real-time power consumption monitoring",
             IoTServiceStatus.IOT_ENABLED,
             ["Real-time monitoring", "Energy analytics", "Cost optimization"]),
        _iot("DG Monitoring", "Diesel generator monitoring and management",
             IoTServiceStatus.SETUP_REQUIRED,
             ["Performance monitoring", "Fuel management", "Maintenance alerts"]),
        _iot("Energy Analytics", "Advanced energy consumption analytics and reporting",
             IoTServiceStatus.REAL_TIME_DATA,
             ["Usage analytics", "Cost analysis", "Efficiency recommendations"]),
    ],
    IoTServiceCategory.COMPLAINT_MANAGEMENT.value: [
        _iot("MyGate Integration", "Integration with MyGate for complaint management",
             IoTServiceStatus.IOT_ENABLED,
             ["Visitor management", "Digital complaints", "Community communication"]),
        _iot("Adda Integration", "Integration with Adda platform for society management",
             IoTServiceStatus.SETUP_REQUIRED,
             ["Society management", "Billing integration", "Communication tools"]),
        _iot("API Webhooks", "Custom API integrations for third-party complaint systems",
             IoTServiceStatus.THIRD_PARTY_READY,
             ["Custom integrations", "Real-time sync", "Webhook notifications"]),
    ],
}


@dataclass(frozen=True)
class CatalogKind:
    """What distinguishes the regular catalog from the IoT one."""
    label: str
    collection_key: str
    categories: Type[Enum]
    defaults: Dict[str, List[Dict[str, Any]]] = field(repr=False)
    iot: bool = False

    @property
    def category_values(self) -> List[str]:
        return [member.value for member in self.categories]


# --------------------------------------------------------------------------
# Catalog document
# --------------------------------------------------------------------------

class ServiceCatalog:
    def __init__(self, document: Dict[str, Any], kind: CatalogKind):
        self.document = copy.deepcopy(document)
        self.kind = kind

    @classmethod
    def build_default(cls, kind: CatalogKind, facility_id: str, facility_name: str,
                      facility_type: str, created_by: str, now: datetime) -> "ServiceCatalog":
        categories = []
        for category, services in kind.defaults.items():
            categories.append({
                "category": category,
                "active_count": 0,
                "total_count": 0,
                "services": [cls._new_service(kind, service, now) for service in services],
                "created_at": now,
                "updated_at": now,
            })
        catalog = cls({
            "facility_id": facility_id,
            "facility_name": facility_name,
            "facility_type": facility_type,
            "service_categories": categories,
            "created_by": created_by,
            "updated_by": created_by,
            "created_at": now,
            "is_deleted": False,
        }, kind)
        catalog.recompute(now)
        return catalog

    @staticmethod
    def _new_service(kind: CatalogKind, data: Dict[str, Any], now: datetime) -> Dict[str, Any]:
        service = {
            "name": data["name"],
            "description": data.get("description") or "",
            "is_active": bool(data.get("is_active", False)),
            "is_available": data.get("is_available", True) is not False,
            "created_at": now,
            "updated_at": now,
        }
        if kind.iot:
            service["status"] = data.get("status") or IoTServiceStatus.SETUP_REQUIRED.value
            service["features"] = list(data.get("features") or [])
            service["integration_endpoint"] = data.get("integration_endpoint")
        return service

    # ----- lookups -----

    def validate_category(self, category: str) -> str:
        if category not in self.kind.category_values:
            raise ValidationError(f"Invalid service category: {category}")
        return category

    @property
    def categories(self) -> List[Dict[str, Any]]:
        return self.document.setdefault("service_categories", [])

    def find_category(self, category: str) -> Optional[Dict[str, Any]]:
        return next((cat for cat in self.categories if cat.get("category") == category), None)

    def get_category(self, category: str) -> Dict[str, Any]:
        self.validate_category(category)
        found = self.find_category(category)
        if found is None:
            raise NotFoundError(f"Category {category} not found")
        return found

    def get_service(self, category: str, name: str) -> Dict[str, Any]:
        cat = self.get_category(category)
        service = next((svc for svc in cat["services"] if svc.get("name") == name), None)
        if service is None:
            raise NotFoundError(f"Service {name} not found in category {category}")
        return service

    # ----- mutations -----

    def add_service(self, category: str, data: Dict[str, Any], now: datetime) -> Dict[str, Any]:
        self.validate_category(category)
        cat = self.find_category(category)
        if cat is None:
            cat = {"category": category, "active_count": 0, "total_count": 0,
                   "services": [], "created_at": now, "updated_at": now}
            self.categories.append(cat)
        if any(svc.get("name") == data["name"] for svc in cat["services"]):
            raise DuplicateError(f"Service '{data['name']}' already exists in {category}")
        service = self._new_service(self.kind, data, now)
        cat["services"].append(service)
        self.recompute(now)
        return service

    def set_service_status(self, category: str, name: str, is_active: bool, now: datetime) -> None:
        service = self.get_service(category, name)
        service["is_active"] = bool(is_active)
        service["updated_at"] = now
        self.recompute(now)

    def update_service_details(self, category: str, old_name: str, now: datetime,
                               new_name: Optional[str] = None,
                               description: Optional[str] = None,
                               **iot_fields: Any) -> None:
        cat = self.get_category(category)
        service = self.get_service(category, old_name)
        if new_name and new_name != old_name:
            if any(svc.get("name") == new_name for svc in cat["services"]):
                raise DuplicateError(f"Service '{new_name}' already exists in {category}")
            service["name"] = new_name
        if description is not None:
            service["description"] = description
        if self.kind.iot:
            for key in ("status", "features", "integration_endpoint"):
                if iot_fields.get(key) is not None:
                    service[key] = iot_fields[key]
        service["updated_at"] = now
        self.recompute(now)

    def remove_service(self, category: str, name: str, now: datetime) -> None:
        cat = self.get_category(category)
        self.get_service(category, name)
        cat["services"] = [svc for svc in cat["services"] if svc.get("name") != name]
        self.recompute(now)

    def recompute(self, now: datetime) -> None:
        total_available = 0
        total_active = 0
        for cat in self.categories:
            services = cat.get("services", [])
            active = [svc for svc in services if svc.get("is_active") and svc.get("is_available")]
            cat["total_count"] = len(services)
            cat["active_count"] = len(active)
            cat["updated_at"] = now
            total_available += len([svc for svc in services if svc.get("is_available")])
            total_active += len(active)

        self.document["total_services_available"] = total_available
        self.document["total_services_active"] = total_active
        if self.kind.iot:
            self.document["iot_enabled"] = total_active > 0
        self.document["last_updated"] = now
        self.document["updated_at"] = now

    # ----- views -----

    def filtered(self, category: Optional[str] = None, include_inactive: bool = True) -> Dict[str, Any]:
        view = copy.deepcopy(self.document)
        categories = view.get("service_categories", [])
        if category:
            self.validate_category(category)
            categories = [cat for cat in categories if cat.get("category") == category]
        if not include_inactive:
            for cat in categories:
                cat["services"] = [svc for svc in cat["services"] if svc.get("is_active")]
        view["service_categories"] = categories
        return view

    def statistics(self) -> Dict[str, Any]:
        total = self.document.get("total_services_available", 0)
        active = self.document.get("total_services_active", 0)
        stats = {
            "total_services": total,
            "active_services": active,
            "inactive_services": total - active,
            "category_breakdown": [
                {
                    "category": cat.get("category"),
                    "total_services": cat.get("total_count", 0),
                    "active_services": cat.get("active_count", 0),
                    "inactive_services": cat.get("total_count", 0) - cat.get("active_count", 0),
                    "services": [
                        {
                            "name": svc.get("name"),
                            "is_active": svc.get("is_active"),
                            "is_available": svc.get("is_available"),
                            **({"status": svc.get("status")} if self.kind.iot else {}),
                        }
                        for svc in cat.get("services", [])
                    ],
                }
                for cat in self.categories
            ],
            "last_updated": self.document.get("last_updated"),
        }
        if self.kind.iot:
            stats["iot_enabled"] = self.document.get("iot_enabled", False)
        return stats


# --------------------------------------------------------------------------
# Request payloads
# --------------------------------------------------------------------------

class CatalogInitialize(BaseModel):
    facility_id: str = Field(..., min_length=1)


class CatalogServiceAdd(BaseModel):
    category: str
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    is_active: bool = False
    is_available: bool = True
    # IoT catalog only
    status: Optional[IoTServiceStatus] = None
    features: Optional[List[str]] = None
    integration_endpoint: Optional[str] = None


class CatalogStatusUpdate(BaseModel):
    category: str
    service_name: str = Field(..., min_length=1)
    is_active: bool


class CatalogDetailsUpdate(BaseModel):
    category: str
    old_service_name: str = Field(..., min_length=1)
    new_service_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    status: Optional[IoTServiceStatus] = None
    features: Optional[List[str]] = None
    integration_endpoint: Optional[str] = None


class CatalogServiceRemove(BaseModel):
    category: str
    service_name: str = Field(..., min_length=1)


class CatalogBulkUpdate(BaseModel):
    services: List[CatalogStatusUpdate]
