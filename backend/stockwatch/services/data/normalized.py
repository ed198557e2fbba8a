"""
Normalized data structures for provider responses.

These are the units actually written to the cache; they are stored as
JSON (model_dump(mode="json")) and rebuilt with model_validate on a hit.
"""
from datetime import datetime
from typing import List, Literal
from pydantic import BaseModel, Field

Impact = Literal["positive", "negative", "neutral"]


class NormalizedQuote(BaseModel):
    """Normalized single-symbol quote."""
    symbol: str
    price: float
    change: float
    change_percent: float
    previous_close: float
    volume: int
    latest_trading_day: str  # YYYY-MM-DD as reported by the provider


class SeriesPoint(BaseModel):
    """Daily closing price."""
    date: str  # YYYY-MM-DD
    close: float


class FinancialEvent(BaseModel):
    """Dated event extracted from AI-text output."""
    date: str  # YYYY-MM-DD
    description: str = Field(max_length=50)
    impact: Impact


class StockAnalysis(BaseModel):
    """Three-section narrative analysis plus the event timeline."""
    ticker: str
    recent_news: List[str]
    major_events: List[str]
    valuation_assessment: List[str]
    events: List[FinancialEvent] = []
    last_updated: datetime
