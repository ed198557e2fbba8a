"""
Watchlist model classes returned to callers.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional
from pydantic import BaseModel


class QuoteSnapshot(BaseModel):
    """Last known quote stored alongside a watchlist entry."""
    price: float
    change: Optional[float] = None
    change_percent: Optional[float] = None
    updated_at: Optional[datetime] = None


class WatchlistEntry(BaseModel):
    """Tracked ticker."""
    ticker: str
    added_at: datetime
    snapshot: Optional[QuoteSnapshot] = None

    @classmethod
    def from_item(cls, item) -> "WatchlistEntry":
        """Create WatchlistEntry from a WatchlistItem row."""
        snapshot = None
        if item.price is not None:
            snapshot = QuoteSnapshot(
                price=item.price,
                change=item.change_amount,
                change_percent=item.change_percent,
                updated_at=item.last_updated,
            )
        return cls(ticker=item.ticker, added_at=item.added_at, snapshot=snapshot)


@dataclass
class RefreshSummary:
    """Outcome of a bulk quote refresh."""
    succeeded: int = 0
    failed: int = 0
    errors: Dict[str, str] = field(default_factory=dict)  # ticker -> error message

    @property
    def total(self) -> int:
        return self.succeeded + self.failed
