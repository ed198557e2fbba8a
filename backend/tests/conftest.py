# backend/tests/conftest.py
"""
Pytest configuration and fixtures for stockwatch backend tests.
"""
from datetime import datetime, timedelta

import pytest

from stockwatch.core.database import create_db_engine, create_session_factory, init_db
from stockwatch.services.cache import CacheStore
from stockwatch.services.watchlist import WatchlistStore


# Test database URL (in-memory SQLite for fast tests)
TEST_DATABASE_URL = "sqlite:///:memory:"


class MutableClock:
    """Clock the tests can move forward instead of sleeping."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(scope="function")
def clock():
    return MutableClock(datetime(2024, 6, 15, 12, 0, 0))


@pytest.fixture(scope="function")
def db_engine():
    """In-memory engine with the schema created (StaticPool, shared connection)."""
    engine = create_db_engine(TEST_DATABASE_URL)
    init_db(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest.fixture(scope="function")
def cache_store(session_factory, clock):
    return CacheStore(session_factory, clock=clock)


@pytest.fixture(scope="function")
def watchlist_store(session_factory, clock):
    return WatchlistStore(session_factory, clock=clock)
