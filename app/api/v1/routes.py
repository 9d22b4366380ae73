from fastapi import APIRouter

from app.api.v1.endpoints.auth import router as auth_router
from app.api.v1.endpoints.employees import router as employees_router
from app.api.v1.endpoints.health import router as health_router
from app.api.v1.endpoints.jubilees import router as jubilees_router
from app.api.v1.endpoints.lifecycle import router as lifecycle_router
from app.api.v1.endpoints.reminder_types import router as reminder_types_router
from app.api.v1.endpoints.reminders import router as reminders_router
from app.api.v1.endpoints.scheduler import router as scheduler_router
from app.api.v1.endpoints.settings import router as settings_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(employees_router, prefix="/employees", tags=["employees"])
api_router.include_router(reminders_router, prefix="/reminders", tags=["reminders"])
api_router.include_router(reminder_types_router, prefix="/reminder-types", tags=["reminder-types"])
api_router.include_router(lifecycle_router, prefix="/lifecycle", tags=["lifecycle"])
api_router.include_router(jubilees_router, tags=["jubilees"])
api_router.include_router(settings_router, prefix="/settings", tags=["settings"])
api_router.include_router(scheduler_router, prefix="/scheduler", tags=["scheduler"])
