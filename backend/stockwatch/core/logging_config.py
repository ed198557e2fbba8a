"""
Logging setup for the backend process.
"""
import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    """Install the root handler once. Safe to call again (no duplicate handlers)."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )
    # httpx logs every request at INFO, which includes the API key in the query string
    logging.getLogger("httpx").setLevel(logging.WARNING)
