"""Health check and monitoring endpoints"""

from fastapi import APIRouter
from app.db.session import get_pool_stats

router = APIRouter(prefix="/api/health", tags=["health"])

POOL_WARNING_PERCENT = 80
POOL_CRITICAL_PERCENT = 90


def classify_utilization(percent: float) -> str:
    if percent >= POOL_CRITICAL_PERCENT:
        return "critical"
    if percent >= POOL_WARNING_PERCENT:
        return "warning"
    return "healthy"


@router.get("/pool")
async def get_pool_health():
    """
    Connection pool usage of the task database.

    The engine is created by the first request that touches storage;
    until then the pool is reported as "idle" with configured limits.
    """
    stats = get_pool_stats()
    capacity = stats["size"] + stats["max_overflow"]
    in_use = stats["checked_out"]
    percent = round(in_use / capacity * 100, 2) if capacity else 0.0

    return {
        "status": classify_utilization(percent) if stats["initialized"] else "idle",
        "engine_initialized": stats["initialized"],
        "in_use": in_use,
        "available": stats["checked_in"],
        "overflow": stats["overflow"],
        "capacity": capacity,
        "utilization_percent": percent,
    }


@router.get("/")
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": "task-workflow-backend",
    }
