"""
Data adapters for fetching market data.
"""
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
import logging

import httpx
from pydantic import ValidationError

from stockwatch.core.clock import Clock, utcnow
from stockwatch.core.config import ALPHA_VANTAGE_BASE_URL, HTTP_TIMEOUT_SECONDS, ttl_for
from stockwatch.core.exceptions import (
    InvalidSymbolError,
    NoDataAvailableError,
    PremiumFeatureError,
    RateLimitExceededError,
    UpstreamHttpError,
)
from stockwatch.services.cache import CacheStore, normalize_key
from stockwatch.services.data.normalized import NormalizedQuote, SeriesPoint

logger = logging.getLogger(__name__)

# Look-back window (days) per historical range
HISTORICAL_RANGES = {
    "1m": 30,
    "3m": 90,
    "1y": 365,
    "5y": 1825,
}


def historical_category(range_key: str) -> str:
    """Cache category for a historical range, e.g. "historical_1y"."""
    if range_key not in HISTORICAL_RANGES:
        raise ValueError(
            f"Unsupported range: {range_key}. Supported: {list(HISTORICAL_RANGES.keys())}"
        )
    return f"historical_{range_key}"


def parse_daily_series(series: Dict[str, Any]) -> List[SeriesPoint]:
    """Turn the provider's {date: bar} mapping into points sorted oldest first.

    Bars with an unparseable date or close are skipped.
    """
    points = []
    for date_str, bar in series.items():
        try:
            day = datetime.strptime(date_str, "%Y-%m-%d").date()
            points.append(SeriesPoint(date=day.isoformat(), close=float(bar["4. close"])))
        except (KeyError, TypeError, ValueError):
            logger.debug(f"Skipping malformed daily bar {date_str!r}")
    points.sort(key=lambda p: p.date)
    return points


def filter_to_window(points: List[SeriesPoint], days: int, now: datetime) -> List[SeriesPoint]:
    """Keep points no older than `days` before `now`.

    A daily bar is timestamped at midnight of its date, so a bar on the
    cutoff day is dropped once `now` is past midnight.
    """
    cutoff = now - timedelta(days=days)
    return [p for p in points if datetime.fromisoformat(p.date) >= cutoff]


def is_premium_notice(message: str) -> bool:
    """True for an "Information" body about a premium-only feature.

    Quota notices also point at the premium plans, so they are recognized
    first by their rate-limit wording.
    """
    lowered = message.lower()
    if "rate limit" in lowered or "call frequency" in lowered or "requests per" in lowered:
        return False
    return "premium" in lowered


class MarketDataAdapter(ABC):
    """Base class for market data adapters."""

    cache: CacheStore

    @abstractmethod
    async def get_quote(self, symbol: str) -> NormalizedQuote:
        """Latest quote for a single symbol."""

    @abstractmethod
    async def validate_symbol(self, symbol: str) -> bool:
        """True if the provider knows the symbol exactly."""

    @abstractmethod
    async def get_historical_series(self, symbol: str, range_key: str) -> List[SeriesPoint]:
        """Daily closes within the look-back window of range_key."""


class AlphaVantageAdapter(MarketDataAdapter):
    """Alpha Vantage adapter for equities.

    Every call goes through the cache first; only a miss reaches the API.
    """

    provider = "Alpha Vantage"

    def __init__(
        self,
        api_key: Optional[str],
        cache: CacheStore,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: str = ALPHA_VANTAGE_BASE_URL,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        clock: Clock = utcnow,
    ):
        """Initialize Alpha Vantage adapter.

        Args:
            api_key: Alpha Vantage API key
            cache: Shared cache store
            http_client: Optional client (tests pass one with a mock transport)
            base_url: Query endpoint
            timeout: Request timeout in seconds when the adapter creates its own client
            clock: Returns the current naive UTC time
        """
        if not api_key:
            raise ValueError(
                "Alpha Vantage API key is required. Please set ALPHA_VANTAGE_API_KEY environment variable."
            )
        self.api_key = api_key
        self.cache = cache
        self.base_url = base_url
        self._clock = clock
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def _query(self, function: str, label: str, **params) -> Dict[str, Any]:
        """Call the query endpoint and check transport and rate-limit signals.

        Args:
            function: Alpha Vantage function name
            label: Symbol the call is for (logging and error messages only)
            **params: Query parameters for the function

        "Error Message" is left to the caller since its meaning depends on the function.
        """
        query = {"function": function, **params, "apikey": self.api_key}
        logger.info(f"Making Alpha Vantage API call: {function} {label}")

        try:
            response = await self.client.get(self.base_url, params=query)
        except httpx.HTTPError as e:
            logger.error(f"Alpha Vantage request failed for {label}: {e}")
            raise UpstreamHttpError(self.provider, None, str(e)) from e

        if response.status_code == 429:
            raise RateLimitExceededError(self.provider)
        if response.status_code >= 400:
            logger.error(f"Alpha Vantage error for {label}: status {response.status_code}")
            raise UpstreamHttpError(self.provider, response.status_code, response.text[:200])

        try:
            data = response.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            raise NoDataAvailableError(label, "data")

        if "Note" in data:
            logger.warning(f"Alpha Vantage rate limit hit: {data['Note']}")
            raise RateLimitExceededError(self.provider)
        if "Information" in data:
            message = str(data["Information"])
            if is_premium_notice(message):
                logger.warning(f"Alpha Vantage premium feature requested for {label}: {message}")
                raise PremiumFeatureError(self.provider, message)
            logger.warning(f"Alpha Vantage rate limit hit: {message}")
            raise RateLimitExceededError(self.provider)

        return data

    def _cached(self, key: str, category: str) -> Optional[Any]:
        cached = self.cache.get(key, category)
        if cached is not None:
            logger.info(f"Using cached {category} data for {key}")
        return cached

    async def get_quote(self, symbol: str) -> NormalizedQuote:
        key = normalize_key(symbol)
        if not key:
            raise InvalidSymbolError(symbol)

        cached = self._cached(key, "quote")
        if cached is not None:
            try:
                return NormalizedQuote.model_validate(cached)
            except ValidationError:
                logger.warning(f"Discarding unreadable cached quote for {key}")

        data = await self._query("GLOBAL_QUOTE", key, symbol=key)

        if "Error Message" in data:
            raise InvalidSymbolError(key)

        quote = data.get("Global Quote") or {}
        if not quote.get("01. symbol"):
            raise NoDataAvailableError(key, "quote data")

        try:
            normalized = NormalizedQuote(
                symbol=quote["01. symbol"],
                price=float(quote["05. price"]),
                change=float(quote["09. change"]),
                change_percent=float(str(quote["10. change percent"]).replace("%", "")),
                previous_close=float(quote["08. previous close"]),
                volume=int(float(quote["06. volume"])),
                latest_trading_day=quote["07. latest trading day"],
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed quote for {key}: {e}")
            raise NoDataAvailableError(key, "quote data") from e

        self.cache.put(key, "quote", normalized.model_dump(mode="json"), ttl_for("quote"))
        return normalized

    async def validate_symbol(self, symbol: str) -> bool:
        key = normalize_key(symbol)
        if not key:
            return False

        cached = self._cached(key, "validation")
        if cached is not None:
            return bool(cached.get("valid"))

        data = await self._query("SYMBOL_SEARCH", key, keywords=key)

        if "Error Message" in data:
            valid = False
        else:
            # Check if we have exact match for the symbol
            matches = data.get("bestMatches") or []
            valid = any(
                str(match.get("1. symbol", "")).upper() == key for match in matches
            )

        # Negative results are cached too, so repeated bad input stays off the API
        self.cache.put(key, "validation", {"valid": valid}, ttl_for("validation"))
        logger.info(f"Symbol {key} validation result: {valid}")
        return valid

    async def get_historical_series(self, symbol: str, range_key: str) -> List[SeriesPoint]:
        category = historical_category(range_key)
        days = HISTORICAL_RANGES[range_key]
        key = normalize_key(symbol)
        if not key:
            raise InvalidSymbolError(symbol)

        cached = self._cached(key, category)
        if cached is not None:
            try:
                return [SeriesPoint.model_validate(p) for p in cached]
            except ValidationError:
                logger.warning(f"Discarding unreadable cached {category} for {key}")

        # compact = last 100 trading days, enough for ranges up to 3 months
        outputsize = "compact" if days <= 90 else "full"
        try:
            data = await self._query("TIME_SERIES_DAILY", key, symbol=key, outputsize=outputsize)
        except PremiumFeatureError:
            if outputsize == "compact":
                raise
            # Free keys cannot request the full history; serve what compact covers
            logger.warning(f"Full history unavailable for {key}, {range_key} limited to the last 100 trading days")
            data = await self._query("TIME_SERIES_DAILY", key, symbol=key, outputsize="compact")

        if "Error Message" in data:
            raise InvalidSymbolError(key)

        series = data.get("Time Series (Daily)")
        if not isinstance(series, dict) or not series:
            raise NoDataAvailableError(key, "historical data")

        points = filter_to_window(parse_daily_series(series), days, self._clock())
        logger.info(f"Parsed {len(points)} points for {key} ({range_key}) from {len(series)} raw bars")

        self.cache.put(key, category, [p.model_dump(mode="json") for p in points], ttl_for(category))
        return points
