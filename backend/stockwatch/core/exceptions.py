"""
Error taxonomy surfaced by the provider adapters.

Callers need to tell a user input error (invalid symbol) apart from provider
exhaustion (rate limit) and from a transient transport failure, so each gets
its own type.
"""
from typing import Optional


class StockWatchError(Exception):
    """Base class for provider and cache errors."""


class InvalidSymbolError(StockWatchError):
    """The provider does not know the requested symbol."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Invalid symbol: {symbol}")


class RateLimitExceededError(StockWatchError):
    """The provider's request quota is exhausted. Never cached."""

    def __init__(self, provider: str, message: Optional[str] = None):
        self.provider = provider
        super().__init__(message or f"{provider} API rate limit exceeded. Please try again later.")


class PremiumFeatureError(StockWatchError):
    """The request needs a paid provider plan (not a quota problem, waiting won't help)."""

    def __init__(self, provider: str, message: Optional[str] = None):
        self.provider = provider
        super().__init__(message or f"This {provider} feature requires a premium plan.")


class NoDataAvailableError(StockWatchError):
    """The request was valid but the provider returned nothing usable."""

    def __init__(self, symbol: str, what: str = "data"):
        self.symbol = symbol
        super().__init__(f"No {what} available for symbol: {symbol}")


class UpstreamHttpError(StockWatchError):
    """Transport-level failure talking to a provider (retryable)."""

    def __init__(self, provider: str, status_code: Optional[int] = None, detail: str = ""):
        self.provider = provider
        self.status_code = status_code
        self.detail = detail
        status = f"status {status_code}" if status_code is not None else "no response"
        super().__init__(f"{provider} HTTP error ({status}): {detail}".rstrip(": "))


class ParseFailure(StockWatchError):
    """Upstream payload could not be turned into a normalized record."""


class RefreshInProgressError(StockWatchError):
    """Another fetch for the same entity and kind is still running."""

    def __init__(self, entity_key: str, kind: str):
        self.entity_key = entity_key
        self.kind = kind
        super().__init__(f"Refresh already in progress for {entity_key} ({kind})")
