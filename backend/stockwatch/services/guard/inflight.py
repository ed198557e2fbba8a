"""
In-flight call deduplication.

Rapid navigation in the UI can trigger the same uncached fetch twice before
the first one has written its result. The guard tracks which keys are being
fetched per operation kind; a second trigger is told to back off instead of
waiting or issuing its own upstream call.
"""
from contextlib import contextmanager
from enum import Enum
from typing import Dict, Iterator, Set
import logging

from stockwatch.services.cache import normalize_key

logger = logging.getLogger(__name__)


class InFlightKind(str, Enum):
    NEWS_ANALYSIS = "news_analysis"
    FINANCIAL_EVENTS = "financial_events"


class InFlightGuard:
    """Per-kind sets of entity keys with a fetch in progress.

    Non-blocking and single-threaded: the check-and-add in try_acquire never
    yields to the event loop, so it is atomic with respect to other tasks.
    """

    def __init__(self):
        self._in_flight: Dict[InFlightKind, Set[str]] = {kind: set() for kind in InFlightKind}

    def try_acquire(self, kind: InFlightKind, entity_key: str) -> bool:
        """Claim (kind, entity_key). False if someone already holds it."""
        key = normalize_key(entity_key)
        held = self._in_flight[kind]
        if key in held:
            return False
        held.add(key)
        return True

    def release(self, kind: InFlightKind, entity_key: str) -> None:
        self._in_flight[kind].discard(normalize_key(entity_key))

    def is_in_flight(self, kind: InFlightKind, entity_key: str) -> bool:
        return normalize_key(entity_key) in self._in_flight[kind]

    def in_flight(self, kind: InFlightKind) -> Set[str]:
        """Snapshot of keys currently being fetched for kind."""
        return set(self._in_flight[kind])

    @contextmanager
    def claim(self, kind: InFlightKind, entity_key: str) -> Iterator[bool]:
        """Scope helper: yields whether the claim was acquired.

        An acquired claim is released on every exit path (return, exception,
        cache short-circuit). A refused claim is never released here, since
        it belongs to the other caller.
        """
        acquired = self.try_acquire(kind, entity_key)
        if not acquired:
            logger.info(f"{kind.value} refresh already in progress for {normalize_key(entity_key)}")
        try:
            yield acquired
        finally:
            if acquired:
                self.release(kind, entity_key)
