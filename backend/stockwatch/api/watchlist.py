"""
API endpoints for the watchlist.
"""
from typing import Dict, List
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from stockwatch.api.deps import get_container, get_market
from stockwatch.core.container import ServiceContainer
from stockwatch.services.cache import normalize_key
from stockwatch.services.data.adapters import MarketDataAdapter
from stockwatch.services.watchlist import WatchlistEntry, refresh_watchlist

logger = logging.getLogger(__name__)

router = APIRouter()


class AddTickerRequest(BaseModel):
    ticker: str = Field(..., min_length=1, max_length=32)


class RemoveTickerResponse(BaseModel):
    ticker: str
    removed: bool


class RefreshSummaryResponse(BaseModel):
    succeeded: int
    failed: int
    errors: Dict[str, str]


@router.get("", response_model=List[WatchlistEntry])
async def list_watchlist(container: ServiceContainer = Depends(get_container)):
    """All tracked tickers, most recently added first."""
    return container.watchlist.list_all()


@router.post("", response_model=WatchlistEntry, status_code=201)
async def add_ticker(
    request: AddTickerRequest,
    container: ServiceContainer = Depends(get_container),
    market: MarketDataAdapter = Depends(get_market),
):
    """Validate the symbol with the provider, then add it."""
    ticker = normalize_key(request.ticker)
    if not ticker:
        raise HTTPException(status_code=400, detail="Ticker must not be blank")
    if container.watchlist.has(ticker):
        raise HTTPException(status_code=409, detail=f"{ticker} is already on the watchlist")

    if not await market.validate_symbol(ticker):
        raise HTTPException(status_code=404, detail=f"Invalid symbol: {ticker}")

    if not container.watchlist.add(ticker):
        raise HTTPException(status_code=409, detail=f"{ticker} is already on the watchlist")

    entry = next(e for e in container.watchlist.list_all() if e.ticker == ticker)
    return entry


@router.delete("/{ticker}", response_model=RemoveTickerResponse)
async def remove_ticker(ticker: str, container: ServiceContainer = Depends(get_container)):
    key = normalize_key(ticker)
    if not container.watchlist.remove(key):
        raise HTTPException(status_code=404, detail=f"{key} is not on the watchlist")
    return RemoveTickerResponse(ticker=key, removed=True)


@router.post("/refresh", response_model=RefreshSummaryResponse)
async def refresh_all(
    container: ServiceContainer = Depends(get_container),
    market: MarketDataAdapter = Depends(get_market),
):
    """Fetch fresh quotes for every ticker and update the snapshots."""
    summary = await refresh_watchlist(container.watchlist, market, force=True)
    return RefreshSummaryResponse(
        succeeded=summary.succeeded,
        failed=summary.failed,
        errors=summary.errors,
    )
