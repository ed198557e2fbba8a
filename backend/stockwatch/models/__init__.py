"""
Database models.
"""
from stockwatch.models.data_cache import DataCache
from stockwatch.models.watchlist import WatchlistItem

__all__ = [
    "DataCache",
    "WatchlistItem",
]
