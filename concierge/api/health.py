"""Health check endpoint."""
import logging

from fastapi import APIRouter, Request

from concierge.core.config import settings

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(request: Request):
    """Liveness check; reports which catalog source is configured."""
    logger.debug(
        f"[HEALTH] Health check requested - Client: {request.client.host if request.client else 'unknown'}"
    )
    return {
        "status": "healthy",
        "service": settings.app_name,
        "catalog": "yaml" if settings.catalog_file else "database",
    }
