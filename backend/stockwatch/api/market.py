"""
API endpoints for market data (quotes, symbol validation, history).
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from stockwatch.api.deps import get_market
from stockwatch.services.cache import normalize_key
from stockwatch.services.data.adapters import HISTORICAL_RANGES, MarketDataAdapter
from stockwatch.services.data.normalized import NormalizedQuote, SeriesPoint

router = APIRouter()


class ValidationResponse(BaseModel):
    ticker: str
    valid: bool


class HistoryResponse(BaseModel):
    ticker: str
    range: str
    points: List[SeriesPoint]


@router.get("/{ticker}/quote", response_model=NormalizedQuote)
async def get_quote(ticker: str, market: MarketDataAdapter = Depends(get_market)):
    return await market.get_quote(ticker)


@router.get("/{ticker}/validate", response_model=ValidationResponse)
async def validate_ticker(ticker: str, market: MarketDataAdapter = Depends(get_market)):
    valid = await market.validate_symbol(ticker)
    return ValidationResponse(ticker=normalize_key(ticker), valid=valid)


@router.get("/{ticker}/history", response_model=HistoryResponse)
async def get_history(
    ticker: str,
    range_key: str = Query("1m", alias="range", description="One of 1m, 3m, 1y, 5y"),
    market: MarketDataAdapter = Depends(get_market),
):
    """Daily closes within the look-back window, oldest first."""
    if range_key not in HISTORICAL_RANGES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported range: {range_key}. Supported: {list(HISTORICAL_RANGES.keys())}",
        )
    points = await market.get_historical_series(ticker, range_key)
    return HistoryResponse(ticker=normalize_key(ticker), range=range_key, points=points)
