"""
Persistent key-value cache for provider responses.

Entries are addressed by (entity_key, category) so quote, validation,
historical-per-range, analysis and events data for the same ticker can be
refreshed independently. Expiry is lazy: expired rows are invisible to
reads but stay on disk until sweep_expired() removes them.
"""
from datetime import timedelta
from typing import Any, Dict, Optional
import json
import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from stockwatch.core.clock import Clock, utcnow
from stockwatch.models.data_cache import DataCache

logger = logging.getLogger(__name__)


def normalize_key(entity_key: str) -> str:
    return (entity_key or "").strip().upper()


class CacheStore:
    """Cache table access. One short-lived session per operation."""

    def __init__(self, session_factory: sessionmaker, clock: Clock = utcnow):
        """Initialize cache store.

        Args:
            session_factory: Session factory bound to the shared database
            clock: Returns the current naive UTC time (injectable for tests)
        """
        self._session_factory = session_factory
        self._clock = clock

    def put(self, entity_key: str, category: str, payload: Any, ttl_hours: float) -> bool:
        """Serialize payload and upsert it with expires_at = now + ttl_hours.

        Returns:
            True if the entry was written, False if serialization or the write failed
        """
        key = normalize_key(entity_key)
        try:
            data = json.dumps(payload)
        except (TypeError, ValueError) as e:
            logger.warning(f"Cannot serialize {category} payload for {key}: {e}")
            return False

        now = self._clock()
        expires_at = now + timedelta(hours=ttl_hours)

        db = self._session_factory()
        try:
            entry = db.query(DataCache).filter(
                DataCache.entity_key == key,
                DataCache.category == category,
            ).first()
            if entry:
                entry.payload = data
                entry.cached_at = now
                entry.expires_at = expires_at
            else:
                db.add(DataCache(
                    entity_key=key,
                    category=category,
                    payload=data,
                    cached_at=now,
                    expires_at=expires_at,
                ))
            db.commit()
            logger.debug(f"Cached {category} for {key} until {expires_at.isoformat()}")
            return True
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to cache {category} for {key}: {e}")
            return False
        finally:
            db.close()

    def get(self, entity_key: str, category: str) -> Optional[Any]:
        """Return the cached payload if it has not expired, else None.

        Expired rows are left in place for sweep_expired().
        """
        key = normalize_key(entity_key)
        db = self._session_factory()
        try:
            entry = db.query(DataCache).filter(
                DataCache.entity_key == key,
                DataCache.category == category,
                DataCache.expires_at > self._clock(),
            ).first()
            if not entry:
                return None
            try:
                return json.loads(entry.payload)
            except ValueError:
                logger.warning(f"Corrupt {category} cache entry for {key}, ignoring")
                return None
        finally:
            db.close()

    def is_valid(self, entity_key: str, category: str) -> bool:
        """True when a live (unexpired) entry exists."""
        key = normalize_key(entity_key)
        db = self._session_factory()
        try:
            return db.query(DataCache.id).filter(
                DataCache.entity_key == key,
                DataCache.category == category,
                DataCache.expires_at > self._clock(),
            ).first() is not None
        finally:
            db.close()

    def invalidate(self, entity_key: str, category: str) -> bool:
        """Delete the entry regardless of expiry. Sibling categories are untouched.

        Returns:
            True if a row was removed
        """
        key = normalize_key(entity_key)
        db = self._session_factory()
        try:
            removed = db.query(DataCache).filter(
                DataCache.entity_key == key,
                DataCache.category == category,
            ).delete(synchronize_session=False)
            db.commit()
            if removed:
                logger.info(f"Invalidated {category} cache for {key}")
            return removed > 0
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to invalidate {category} cache for {key}: {e}")
            return False
        finally:
            db.close()

    def sweep_expired(self) -> int:
        """Delete every row whose expiry has passed.

        Returns:
            Number of rows removed
        """
        db = self._session_factory()
        try:
            removed = db.query(DataCache).filter(
                DataCache.expires_at <= self._clock(),
            ).delete(synchronize_session=False)
            db.commit()
            logger.info(f"Cleaned up {removed} expired cache entries")
            return removed
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to sweep expired cache entries: {e}")
            return 0
        finally:
            db.close()

    def stats(self) -> Dict[str, int]:
        """Diagnostic counts: all rows and rows already past expiry."""
        db = self._session_factory()
        try:
            total = db.query(func.count(DataCache.id)).scalar() or 0
            expired = db.query(func.count(DataCache.id)).filter(
                DataCache.expires_at <= self._clock(),
            ).scalar() or 0
            return {"total": total, "expired": expired}
        finally:
            db.close()
