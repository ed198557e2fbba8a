"""
Database connection and session management.
"""
from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
import logging

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create the engine for the watchlist/cache database.

    Args:
        database_url: SQLAlchemy URL (e.g. "sqlite:///data/watchlist.db")
        echo: Set to True for SQL debugging

    Returns:
        Engine bound to the database
    """
    url = make_url(database_url)
    connect_args = {}
    kwargs = {}

    if url.get_backend_name() == "sqlite":
        # The event loop and the scheduler may touch the connection from different threads
        connect_args["check_same_thread"] = False
        if url.database in (None, "", ":memory:"):
            # Keep a single connection so the in-memory schema survives between sessions
            kwargs["poolclass"] = StaticPool
        else:
            # Create data directory if it doesn't exist
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    return create_engine(database_url, echo=echo, connect_args=connect_args, **kwargs)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory handed to the stores."""
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create the watchlist and cache tables if they don't exist."""
    # Import models so they register with Base.metadata
    import stockwatch.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info(f"Database initialised at {engine.url}")
