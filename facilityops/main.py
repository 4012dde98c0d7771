from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from .core.config import settings
from .core.errors import register_exception_handlers
from .core.firebase_init import initialize_firebase, get_firebase_status

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Initialize Firebase first
logger.info("🔥 Initializing Firebase for FastAPI app...")
if not get_firebase_status()['available']:
    if not initialize_firebase():
        logger.warning("⚠️ Firebase initialization failed - database calls will fail until credentials are provided")

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Facility onboarding, service catalogs, hygiene checklists and staff planning",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


def safe_include_router(router_module_path: str, router_name: str = "router"):
    """Safely include a router with error handling"""
    try:
        module = __import__(router_module_path, fromlist=[router_name])
        router = getattr(module, router_name)
        app.include_router(router)
        logger.info(f"✅ Successfully included {router_module_path}.{router_name}")
        return True
    except Exception as e:
        logger.exception(f"❌ Failed to include {router_module_path}.{router_name}: {e}")
        return False


logger.info("Loading routers...")

routers_to_load = [
    ("facilityops.routers.auth", "router", "Authentication"),
    ("facilityops.routers.facilities", "router", "Facilities"),
    ("facilityops.routers.service_catalog", "router", "Service Management"),
    ("facilityops.routers.service_catalog", "iot_router", "IoT Service Management"),
    ("facilityops.routers.floor_locations", "router", "Floor Locations"),
    ("facilityops.routers.daily_checklists", "router", "Daily Checklists"),
    ("facilityops.routers.hygiene", "router", "Hygiene Sections"),
    ("facilityops.routers.hygiene", "checklist_router", "Hygiene Checklists"),
    ("facilityops.routers.staff_scheduling", "router", "Rosters"),
    ("facilityops.routers.staff_scheduling", "leave_router", "Leave Planner"),
    ("facilityops.routers.staff_scheduling", "shift_router", "Shift Schedules"),
    ("facilityops.routers.staff_scheduling", "weekoff_router", "Week-off Planner"),
    ("facilityops.routers.power_management", "router", "Power Management"),
    ("facilityops.routers.water_management", "router", "Water Tanks"),
    ("facilityops.routers.water_management", "borewell_router", "Borewells"),
    ("facilityops.routers.water_management", "cauvery_router", "Cauvery Supply"),
    ("facilityops.routers.water_management", "tanker_router", "Tankers"),
    ("facilityops.routers.quality_management", "router", "STP Readings"),
    ("facilityops.routers.quality_management", "wtp_router", "WTP Readings"),
    ("facilityops.routers.quality_management", "pool_router", "Swimming Pool Readings"),
    ("facilityops.routers.quality_management", "ro_router", "RO Plant Readings"),
    ("facilityops.routers.service_providers", "router", "Service Providers"),
    ("facilityops.routers.employees", "router", "Employees"),
]

successful_routers = []
failed_routers = []

for router_path, router_name, router_description in routers_to_load:
    if safe_include_router(router_path, router_name):
        successful_routers.append(router_description)
    else:
        failed_routers.append(router_description)

logger.info(f"Successfully loaded routers: {successful_routers}")
if failed_routers:
    logger.warning(f"Failed to load routers: {failed_routers}")


@app.get("/")
async def root():
    return {
        "message": f"Welcome to the {settings.PROJECT_NAME}",
        "firebase_status": get_firebase_status(),
        "loaded_routers": successful_routers,
        "failed_routers": failed_routers,
    }


@app.get("/health")
async def health_check():
    firebase_status = get_firebase_status()
    return {
        "status": "healthy" if firebase_status['available'] else "degraded",
        "firebase_available": firebase_status['available'],
        "loaded_routers": len(successful_routers),
        "failed_routers": len(failed_routers),
    }
