# backend/tests/unit/test_refresh.py
"""
Unit tests for the bulk watchlist refresh.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest

from stockwatch.core.exceptions import InvalidSymbolError, RateLimitExceededError
from stockwatch.services.data.normalized import NormalizedQuote
from stockwatch.services.watchlist import refresh_watchlist


def quote(symbol, price):
    return NormalizedQuote(
        symbol=symbol,
        price=price,
        change=1.0,
        change_percent=0.5,
        previous_close=price - 1.0,
        volume=1000,
        latest_trading_day="2024-06-14",
    )


def fake_market(cache_store, outcomes):
    market = MagicMock()
    market.cache = cache_store

    async def get_quote(symbol):
        outcome = outcomes[symbol]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    market.get_quote = AsyncMock(side_effect=get_quote)
    return market


class TestRefreshWatchlist:
    @pytest.mark.asyncio
    async def test_empty_watchlist(self, watchlist_store, cache_store):
        market = fake_market(cache_store, {})
        summary = await refresh_watchlist(watchlist_store, market)
        assert (summary.succeeded, summary.failed, summary.errors) == (0, 0, {})
        market.get_quote.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_partial_failure_keeps_other_results(self, watchlist_store, cache_store):
        for ticker in ("AAPL", "MSFT", "ZZZZ"):
            watchlist_store.add(ticker)
        market = fake_market(cache_store, {
            "AAPL": quote("AAPL", 190.0),
            "MSFT": RateLimitExceededError("Alpha Vantage"),
            "ZZZZ": InvalidSymbolError("ZZZZ"),
        })

        summary = await refresh_watchlist(watchlist_store, market)

        assert summary.succeeded == 1
        assert summary.failed == 2
        assert summary.total == 3
        assert set(summary.errors) == {"MSFT", "ZZZZ"}
        assert "ZZZZ" in summary.errors["ZZZZ"]

        snapshots = {e.ticker: e.snapshot for e in watchlist_store.list_all()}
        assert snapshots["AAPL"].price == 190.0
        assert snapshots["MSFT"] is None

    @pytest.mark.asyncio
    async def test_force_invalidates_cached_quotes(self, watchlist_store, cache_store):
        watchlist_store.add("AAPL")
        cache_store.put("AAPL", "quote", {"stale": True}, ttl_hours=24)
        cache_store.put("AAPL", "validation", {"valid": True}, ttl_hours=24)
        market = fake_market(cache_store, {"AAPL": quote("AAPL", 191.0)})

        await refresh_watchlist(watchlist_store, market, force=True)

        assert cache_store.get("AAPL", "quote") is None
        assert cache_store.get("AAPL", "validation") == {"valid": True}

    @pytest.mark.asyncio
    async def test_without_force_cache_is_kept(self, watchlist_store, cache_store):
        watchlist_store.add("AAPL")
        cache_store.put("AAPL", "quote", {"cached": True}, ttl_hours=24)
        market = fake_market(cache_store, {"AAPL": quote("AAPL", 191.0)})

        await refresh_watchlist(watchlist_store, market, force=False)

        assert cache_store.get("AAPL", "quote") == {"cached": True}
