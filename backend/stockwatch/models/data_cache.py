"""
Data cache model for provider responses.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, UniqueConstraint, Index
from stockwatch.core.database import Base


class DataCache(Base):
    __tablename__ = "data_cache"
    __table_args__ = (
        UniqueConstraint("entity_key", "category", name="uq_data_cache_entity_category"),
        Index("idx_cache_entity_category", "entity_key", "category"),
    )

    id = Column(Integer, primary_key=True, index=True)
    entity_key = Column(String(32), nullable=False)  # Uppercase ticker, e.g. "AAPL"
    category = Column(String(64), nullable=False)  # quote, validation, historical_<range>, analysis, events
    payload = Column(Text, nullable=False)  # JSON string
    cached_at = Column(DateTime, nullable=False)  # UTC
    expires_at = Column(DateTime, nullable=False, index=True)  # UTC
