"""
API endpoints for cache maintenance.
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from stockwatch.api.deps import get_container
from stockwatch.core.config import ttl_for
from stockwatch.core.container import ServiceContainer
from stockwatch.services.cache import normalize_key

router = APIRouter()


class CacheStatsResponse(BaseModel):
    total: int
    expired: int


class SweepResponse(BaseModel):
    removed: int


class InvalidateResponse(BaseModel):
    ticker: str
    category: str
    removed: bool


@router.get("/stats", response_model=CacheStatsResponse)
async def cache_stats(container: ServiceContainer = Depends(get_container)):
    return container.cache.stats()


@router.post("/sweep", response_model=SweepResponse)
async def sweep_cache(container: ServiceContainer = Depends(get_container)):
    """Delete expired entries now instead of waiting for the scheduled sweep."""
    return SweepResponse(removed=container.cache.sweep_expired())


@router.delete("/{ticker}/{category}", response_model=InvalidateResponse)
async def invalidate_entry(ticker: str, category: str, container: ServiceContainer = Depends(get_container)):
    """Drop one cached entry so the next read goes upstream."""
    try:
        ttl_for(category)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    key = normalize_key(ticker)
    removed = container.cache.invalidate(key, category)
    return InvalidateResponse(ticker=key, category=category, removed=removed)
