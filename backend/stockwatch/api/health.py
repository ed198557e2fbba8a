"""
Health check endpoint.
"""
from fastapi import APIRouter, Depends

from stockwatch.api.deps import get_container
from stockwatch.core.container import ServiceContainer

router = APIRouter()


@router.get("/health")
async def health(container: ServiceContainer = Depends(get_container)):
    """Liveness plus which providers are configured."""
    return {
        "status": "ok",
        "market_data": container.market is not None,
        "analysis": container.analysis is not None,
        "metering": bool(container.meter and container.meter.enabled),
    }
