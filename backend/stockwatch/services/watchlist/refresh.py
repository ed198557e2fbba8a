"""
Bulk quote refresh for the whole watchlist.
"""
import asyncio
import logging

from stockwatch.services.data.adapters import MarketDataAdapter
from stockwatch.services.watchlist.watchlist_models import RefreshSummary
from stockwatch.services.watchlist.watchlist_store import WatchlistStore

logger = logging.getLogger(__name__)


async def refresh_watchlist(
    store: WatchlistStore,
    market: MarketDataAdapter,
    force: bool = True,
) -> RefreshSummary:
    """Fetch quotes for every entry concurrently and update the snapshots.

    One ticker failing does not abort the others; each outcome is recorded
    in the summary.

    Args:
        store: Watchlist store
        market: Market data adapter (its cache answers first)
        force: Invalidate each cached quote first so the refresh reaches upstream
    """
    tickers = [entry.ticker for entry in store.list_all()]
    summary = RefreshSummary()
    if not tickers:
        return summary

    if force:
        for ticker in tickers:
            market.cache.invalidate(ticker, "quote")

    results = await asyncio.gather(
        *[market.get_quote(ticker) for ticker in tickers],
        return_exceptions=True,
    )

    for ticker, result in zip(tickers, results):
        if isinstance(result, Exception):
            summary.failed += 1
            summary.errors[ticker] = str(result)
            logger.warning(f"Quote refresh failed for {ticker}: {result}")
            continue
        store.update_quote_snapshot(ticker, result.price, result.change, result.change_percent)
        summary.succeeded += 1

    logger.info(f"Watchlist refresh: {summary.succeeded} succeeded, {summary.failed} failed")
    return summary
