"""
Local configuration example for the backend.
Copy this file as `stockwatch/config_local.py` and keep it out of git.
"""

# Database (SQLite file shared by the watchlist and the API cache)
DATABASE_URL = "sqlite:///data/watchlist.db"

# Alpha Vantage (quotes, symbol search, daily series)
# Free tier allows 25 requests per day, everything is cached for 24 hours.
ALPHA_VANTAGE_API_KEY = "PASTE_YOUR_KEY_HERE"
ALPHA_VANTAGE_BASE_URL = "https://www.alphavantage.co/query"

# Perplexity (news analysis and financial events)
PERPLEXITY_API_KEY = "PASTE_YOUR_KEY_HERE"
PERPLEXITY_BASE_URL = "https://api.perplexity.ai"
DEFAULT_LLM_MODEL = "sonar-pro"  # change as needed

# Usage metering
# Cost records are POSTed here after every successful Perplexity call.
# Leave METERING_URL as None to disable metering.
PAID_API_KEY = "PASTE_YOUR_KEY_HERE"
METERING_URL = None
METERING_CUSTOMER_ID = "joe"
METERING_AGENT_ID = "sentry_agent"

# Housekeeping
CACHE_SWEEP_INTERVAL_HOURS = 6  # expired cache rows are deleted on startup and on this interval
HTTP_TIMEOUT_SECONDS = 30.0
LOG_LEVEL = "INFO"
