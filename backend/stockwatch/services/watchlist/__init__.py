"""
Watchlist persistence and bulk refresh.
"""
from stockwatch.services.watchlist.watchlist_store import WatchlistStore
from stockwatch.services.watchlist.watchlist_models import QuoteSnapshot, WatchlistEntry, RefreshSummary
from stockwatch.services.watchlist.refresh import refresh_watchlist

__all__ = [
    "WatchlistStore",
    "WatchlistEntry",
    "QuoteSnapshot",
    "RefreshSummary",
    "refresh_watchlist",
]
