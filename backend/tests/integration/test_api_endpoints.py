# backend/tests/integration/test_api_endpoints.py
"""
Integration tests for the HTTP API (real stores, faked providers).
"""
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from stockwatch.core.container import ServiceContainer
from stockwatch.core.exceptions import (
    InvalidSymbolError,
    NoDataAvailableError,
    PremiumFeatureError,
    RateLimitExceededError,
    RefreshInProgressError,
    UpstreamHttpError,
)
from stockwatch.main import create_app
from stockwatch.services.data.normalized import FinancialEvent, NormalizedQuote, SeriesPoint, StockAnalysis


def quote(symbol="AAPL", price=190.5):
    return NormalizedQuote(
        symbol=symbol,
        price=price,
        change=1.25,
        change_percent=0.66,
        previous_close=189.25,
        volume=1000,
        latest_trading_day="2024-06-14",
    )


@pytest.fixture
def market(cache_store):
    market = MagicMock()
    market.cache = cache_store
    market.get_quote = AsyncMock(return_value=quote())
    market.validate_symbol = AsyncMock(return_value=True)
    market.get_historical_series = AsyncMock(return_value=[
        SeriesPoint(date="2024-06-13", close=189.25),
        SeriesPoint(date="2024-06-14", close=190.5),
    ])
    return market


@pytest.fixture
def analysis_service():
    service = MagicMock()
    service.get_analysis = AsyncMock(return_value=StockAnalysis(
        ticker="AAPL",
        recent_news=["Apple unveiled new AI features"],
        major_events=["Record services revenue"],
        valuation_assessment=["Fairly valued"],
        events=[FinancialEvent(date="2024-05-02", description="Q2 earnings beat", impact="positive")],
        last_updated=datetime(2024, 6, 15, 12, 0, 0),
    ))
    service.get_financial_events = AsyncMock(return_value=[
        FinancialEvent(date="2024-05-02", description="Q2 earnings beat", impact="positive"),
    ])
    return service


@pytest.fixture
def container(cache_store, watchlist_store, market, analysis_service):
    return ServiceContainer(
        cache=cache_store,
        watchlist=watchlist_store,
        market=market,
        analysis=analysis_service,
    )


@pytest.fixture
def client(container):
    return TestClient(create_app(container))


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["market_data"] is True
        assert body["analysis"] is True


class TestWatchlistEndpoints:
    """Test watchlist CRUD and bulk refresh."""

    def test_add_and_list(self, client, market):
        response = client.post("/api/watchlist", json={"ticker": "aapl"})
        assert response.status_code == 201
        assert response.json()["ticker"] == "AAPL"
        market.validate_symbol.assert_awaited_once_with("AAPL")

        response = client.get("/api/watchlist")
        assert response.status_code == 200
        assert [e["ticker"] for e in response.json()] == ["AAPL"]

    def test_add_invalid_symbol(self, client, market, watchlist_store):
        market.validate_symbol.return_value = False
        response = client.post("/api/watchlist", json={"ticker": "ZZZZ"})
        assert response.status_code == 404
        assert watchlist_store.count() == 0

    def test_add_duplicate(self, client, watchlist_store, market):
        watchlist_store.add("AAPL")
        response = client.post("/api/watchlist", json={"ticker": "AAPL"})
        assert response.status_code == 409
        market.validate_symbol.assert_not_awaited()

    def test_add_blank_ticker(self, client):
        response = client.post("/api/watchlist", json={"ticker": "   "})
        assert response.status_code == 400

    def test_add_while_rate_limited(self, client, market, watchlist_store):
        market.validate_symbol.side_effect = RateLimitExceededError("Alpha Vantage")
        response = client.post("/api/watchlist", json={"ticker": "AAPL"})
        assert response.status_code == 429
        assert response.json()["error"] == "RateLimitExceededError"
        assert watchlist_store.count() == 0

    def test_remove(self, client, watchlist_store):
        watchlist_store.add("AAPL")
        response = client.delete("/api/watchlist/aapl")
        assert response.status_code == 200
        assert response.json() == {"ticker": "AAPL", "removed": True}

        response = client.delete("/api/watchlist/AAPL")
        assert response.status_code == 404

    def test_refresh(self, client, watchlist_store, market):
        watchlist_store.add("AAPL")
        watchlist_store.add("MSFT")

        async def get_quote(symbol):
            if symbol == "MSFT":
                raise UpstreamHttpError("Alpha Vantage", 503, "unavailable")
            return quote(symbol)

        market.get_quote.side_effect = get_quote

        response = client.post("/api/watchlist/refresh")
        assert response.status_code == 200
        body = response.json()
        assert body["succeeded"] == 1
        assert body["failed"] == 1
        assert list(body["errors"]) == ["MSFT"]

        entries = {e["ticker"]: e for e in client.get("/api/watchlist").json()}
        assert entries["AAPL"]["snapshot"]["price"] == 190.5
        assert entries["MSFT"]["snapshot"] is None


class TestMarketEndpoints:
    def test_quote(self, client):
        response = client.get("/api/market/AAPL/quote")
        assert response.status_code == 200
        assert response.json()["price"] == 190.5

    @pytest.mark.parametrize(
        "error, status_code",
        [
            (InvalidSymbolError("ZZZZ"), 404),
            (NoDataAvailableError("ZZZZ"), 404),
            (RateLimitExceededError("Alpha Vantage"), 429),
            (PremiumFeatureError("Alpha Vantage"), 403),
            (UpstreamHttpError("Alpha Vantage", 500, "boom"), 502),
        ],
    )
    def test_quote_errors(self, client, market, error, status_code):
        market.get_quote.side_effect = error
        response = client.get("/api/market/ZZZZ/quote")
        assert response.status_code == status_code
        assert response.json()["detail"] == str(error)

    def test_validate(self, client):
        response = client.get("/api/market/aapl/validate")
        assert response.status_code == 200
        assert response.json() == {"ticker": "AAPL", "valid": True}

    def test_history(self, client, market):
        response = client.get("/api/market/AAPL/history", params={"range": "3m"})
        assert response.status_code == 200
        body = response.json()
        assert body["range"] == "3m"
        assert [p["date"] for p in body["points"]] == ["2024-06-13", "2024-06-14"]
        market.get_historical_series.assert_awaited_once_with("AAPL", "3m")

    def test_history_defaults_to_one_month(self, client, market):
        client.get("/api/market/AAPL/history")
        market.get_historical_series.assert_awaited_once_with("AAPL", "1m")

    def test_history_bad_range(self, client, market):
        response = client.get("/api/market/AAPL/history", params={"range": "10y"})
        assert response.status_code == 400
        market.get_historical_series.assert_not_awaited()

    def test_market_unconfigured(self, cache_store, watchlist_store):
        client = TestClient(create_app(ServiceContainer(cache=cache_store, watchlist=watchlist_store)))
        response = client.get("/api/market/AAPL/quote")
        assert response.status_code == 503


class TestAnalysisEndpoints:
    def test_analysis(self, client):
        response = client.get("/api/analysis/AAPL")
        assert response.status_code == 200
        body = response.json()
        assert body["ticker"] == "AAPL"
        assert body["events"][0]["impact"] == "positive"

    def test_analysis_in_progress(self, client, analysis_service):
        analysis_service.get_analysis.side_effect = RefreshInProgressError("AAPL", "news_analysis")
        response = client.get("/api/analysis/AAPL")
        assert response.status_code == 409

    def test_events(self, client):
        response = client.get("/api/analysis/AAPL/events")
        assert response.status_code == 200
        assert response.json()[0]["description"] == "Q2 earnings beat"

    def test_events_in_progress(self, client, analysis_service):
        analysis_service.get_financial_events.side_effect = RefreshInProgressError("AAPL", "financial_events")
        response = client.get("/api/analysis/AAPL/events")
        assert response.status_code == 409
        analysis_service.get_financial_events.assert_awaited_once_with("AAPL", raise_if_busy=True)


class TestCacheEndpoints:
    def test_stats_and_sweep(self, client, cache_store, clock):
        cache_store.put("AAPL", "quote", {"price": 1.0}, ttl_hours=1)
        cache_store.put("MSFT", "quote", {"price": 2.0}, ttl_hours=48)
        clock.advance(hours=2)

        assert client.get("/api/cache/stats").json() == {"total": 2, "expired": 1}
        assert client.post("/api/cache/sweep").json() == {"removed": 1}
        assert client.get("/api/cache/stats").json() == {"total": 1, "expired": 0}

    def test_invalidate(self, client, cache_store):
        cache_store.put("AAPL", "analysis", {"ticker": "AAPL"}, ttl_hours=24)
        response = client.delete("/api/cache/aapl/analysis")
        assert response.status_code == 200
        assert response.json() == {"ticker": "AAPL", "category": "analysis", "removed": True}
        assert cache_store.get("AAPL", "analysis") is None

    def test_invalidate_unknown_category(self, client):
        response = client.delete("/api/cache/AAPL/fundamentals")
        assert response.status_code == 400
