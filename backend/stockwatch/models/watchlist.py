"""
Watchlist model (tracked tickers with last known quote).
"""
from sqlalchemy import Column, Integer, String, DateTime, Float
from stockwatch.core.database import Base


class WatchlistItem(Base):
    __tablename__ = "watchlist"

    id = Column(Integer, primary_key=True, index=True)
    ticker = Column(String(32), unique=True, index=True, nullable=False)  # Always uppercase
    added_at = Column(DateTime, nullable=False, index=True)  # UTC
    price = Column(Float, nullable=True)
    change_amount = Column(Float, nullable=True)
    change_percent = Column(Float, nullable=True)
    last_updated = Column(DateTime, nullable=True)  # When the quote snapshot was last written
