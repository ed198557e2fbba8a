"""
Watchlist persistence (same database file as the cache).
"""
from typing import List
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from stockwatch.core.clock import Clock, utcnow
from stockwatch.models.watchlist import WatchlistItem
from stockwatch.services.cache import normalize_key
from stockwatch.services.watchlist.watchlist_models import WatchlistEntry

logger = logging.getLogger(__name__)


class WatchlistStore:
    """Ordered set of tracked tickers with their last quote snapshot.

    Absence is never an error: missing tickers yield False, not exceptions.
    """

    def __init__(self, session_factory: sessionmaker, clock: Clock = utcnow):
        self._session_factory = session_factory
        self._clock = clock

    def add(self, ticker: str) -> bool:
        """Insert the ticker. False if it is already on the watchlist.

        The symbol should already have been validated against the provider.
        """
        key = normalize_key(ticker)
        if not key:
            return False

        db = self._session_factory()
        try:
            db.add(WatchlistItem(ticker=key, added_at=self._clock()))
            db.commit()
            logger.info(f"Added {key} to watchlist")
            return True
        except IntegrityError:
            # Stock already exists (UNIQUE constraint)
            db.rollback()
            return False
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to add {key} to watchlist: {e}")
            return False
        finally:
            db.close()

    def remove(self, ticker: str) -> bool:
        """Delete the ticker. False if it was not on the watchlist."""
        key = normalize_key(ticker)
        db = self._session_factory()
        try:
            removed = db.query(WatchlistItem).filter(
                WatchlistItem.ticker == key,
            ).delete(synchronize_session=False)
            db.commit()
            if removed:
                logger.info(f"Removed {key} from watchlist")
            return removed > 0
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to remove {key} from watchlist: {e}")
            return False
        finally:
            db.close()

    def list_all(self) -> List[WatchlistEntry]:
        """All entries, most recently added first."""
        db = self._session_factory()
        try:
            items = db.query(WatchlistItem).order_by(
                WatchlistItem.added_at.desc(),
                WatchlistItem.id.desc(),
            ).all()
            return [WatchlistEntry.from_item(item) for item in items]
        finally:
            db.close()

    def has(self, ticker: str) -> bool:
        db = self._session_factory()
        try:
            return db.query(WatchlistItem.id).filter(
                WatchlistItem.ticker == normalize_key(ticker),
            ).first() is not None
        finally:
            db.close()

    def count(self) -> int:
        db = self._session_factory()
        try:
            return db.query(func.count(WatchlistItem.id)).scalar() or 0
        finally:
            db.close()

    def update_quote_snapshot(self, ticker: str, price: float, change: float, change_percent: float) -> bool:
        """Overwrite the snapshot fields in place and stamp last_updated.

        Returns:
            False if the ticker is not on the watchlist
        """
        key = normalize_key(ticker)
        db = self._session_factory()
        try:
            item = db.query(WatchlistItem).filter(WatchlistItem.ticker == key).first()
            if not item:
                return False
            item.price = price
            item.change_amount = change
            item.change_percent = change_percent
            item.last_updated = self._clock()
            db.commit()
            return True
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to update quote snapshot for {key}: {e}")
            return False
        finally:
            db.close()
