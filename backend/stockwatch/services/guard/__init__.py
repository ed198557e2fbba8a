"""
In-flight call deduplication guard.
"""
from stockwatch.services.guard.inflight import InFlightGuard, InFlightKind

__all__ = [
    "InFlightGuard",
    "InFlightKind",
]
