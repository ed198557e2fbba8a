"""
Time helpers. All persisted timestamps are naive UTC.
"""
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current UTC time without tzinfo (matches what SQLite hands back)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
