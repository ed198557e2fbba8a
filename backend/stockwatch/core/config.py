"""
Configuration management.
Loads from config_local.py (gitignored) for secrets, with defaults.
"""
import os
from typing import Optional

# Try to import local config (gitignored)
try:
    from stockwatch.config_local import (
        DATABASE_URL,
        ALPHA_VANTAGE_API_KEY,
        ALPHA_VANTAGE_BASE_URL,
        PERPLEXITY_API_KEY,
        PERPLEXITY_BASE_URL,
        DEFAULT_LLM_MODEL,
    )
    # Metering and housekeeping config with fallbacks if not present
    try:
        from stockwatch.config_local import (
            PAID_API_KEY,
            METERING_URL,
            METERING_CUSTOMER_ID,
            METERING_AGENT_ID,
            CACHE_SWEEP_INTERVAL_HOURS,
            HTTP_TIMEOUT_SECONDS,
            LOG_LEVEL,
        )
    except ImportError:
        PAID_API_KEY = os.environ.get("PAID_API_KEY")
        METERING_URL = os.environ.get("METERING_URL")
        METERING_CUSTOMER_ID = "joe"
        METERING_AGENT_ID = "sentry_agent"
        CACHE_SWEEP_INTERVAL_HOURS = 6
        HTTP_TIMEOUT_SECONDS = 30.0
        LOG_LEVEL = "INFO"
except ImportError:
    # Fallback defaults, secrets come from the environment
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "sqlite:///data/watchlist.db")
    ALPHA_VANTAGE_API_KEY: Optional[str] = os.environ.get("ALPHA_VANTAGE_API_KEY")
    ALPHA_VANTAGE_BASE_URL: str = "https://www.alphavantage.co/query"
    PERPLEXITY_API_KEY: Optional[str] = os.environ.get("PERPLEXITY_API_KEY")
    PERPLEXITY_BASE_URL: str = "https://api.perplexity.ai"
    DEFAULT_LLM_MODEL: str = "sonar-pro"
    PAID_API_KEY: Optional[str] = os.environ.get("PAID_API_KEY")
    METERING_URL: Optional[str] = os.environ.get("METERING_URL")  # None = metering disabled
    METERING_CUSTOMER_ID: str = "joe"
    METERING_AGENT_ID: str = "sentry_agent"
    CACHE_SWEEP_INTERVAL_HOURS: float = 6
    HTTP_TIMEOUT_SECONDS: float = 30.0
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")


# ── Per category TTL (hours) ──────────────────────────────────
# Every upstream provider here has a small daily quota, so everything
# is kept for a day and refreshed explicitly by the user.
CACHE_TTL_HOURS = {
    "quote":      24,
    "validation": 24,
    "historical": 24,   # applies to every historical_<range> category
    "analysis":   24,
    "events":     24,
}


def ttl_for(category: str) -> float:
    """Return the TTL in hours for a cache category.

    `historical_1m`, `historical_5y` etc. share the `historical` entry.
    """
    if category.startswith("historical_"):
        return CACHE_TTL_HOURS["historical"]
    try:
        return CACHE_TTL_HOURS[category]
    except KeyError:
        raise ValueError(f"Unknown cache category: {category}")


def get_settings():
    """Return settings object consumed by the service container."""
    return type("Settings", (), {
        "database_url": DATABASE_URL,
        "alpha_vantage_api_key": ALPHA_VANTAGE_API_KEY,
        "alpha_vantage_base_url": ALPHA_VANTAGE_BASE_URL,
        "perplexity_api_key": PERPLEXITY_API_KEY,
        "perplexity_base_url": PERPLEXITY_BASE_URL,
        "default_llm_model": DEFAULT_LLM_MODEL,
        "paid_api_key": PAID_API_KEY,
        "metering_url": METERING_URL,
        "metering_customer_id": METERING_CUSTOMER_ID,
        "metering_agent_id": METERING_AGENT_ID,
        "cache_sweep_interval_hours": CACHE_SWEEP_INTERVAL_HOURS,
        "http_timeout_seconds": HTTP_TIMEOUT_SECONDS,
        "log_level": LOG_LEVEL,
    })()
