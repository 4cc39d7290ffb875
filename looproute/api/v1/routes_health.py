# looproute/api/v1/routes_health.py
from fastapi import APIRouter
from looproute.core.config import settings

router = APIRouter(
    prefix="/health",
    tags=["health"],
)


@router.get("/", summary="Health check")
async def health_check():
    """
    Report that the API is up and whether loops come from the routing engine
    or from the geometric fallback only.
    """
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "routing_engine": "configured" if settings.GRAPHHOPPER_URL else "fallback-only",
    }
