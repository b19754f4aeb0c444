from fastapi import APIRouter
from app.api import health
from app.features.audit_logs import router as audit_logs_router
from app.features.tasks import router as tasks_router

api_router = APIRouter()

# Include all sub-routers
api_router.include_router(health.router)
api_router.include_router(tasks_router)
api_router.include_router(audit_logs_router)
