"""Database engines and sessions for the rule library and run history."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from alchemist.logger import logger

from .models import Base

DEFAULT_DB_URL = "sqlite:///alchemist.db"

_engines: Dict[str, Engine] = {}


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # findings.run_id must point at an existing run
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(db_url: str = DEFAULT_DB_URL, echo: bool = False) -> Engine:
    """Create (or reuse) the engine for a database URL."""
    engine = _engines.get(db_url)
    if engine is None:
        engine = create_engine(db_url, echo=echo)
        if engine.dialect.name == "sqlite":
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        # in-memory databases are private to one engine, never share them
        if ":memory:" not in db_url:
            _engines[db_url] = engine
    return engine


def init_database(db_url: str = DEFAULT_DB_URL) -> None:
    """Create the rules, analysis_runs and findings tables if missing."""
    Base.metadata.create_all(create_db_engine(db_url))
    logger.info("Database initialized: %s", db_url)


def get_session(db_url: str = DEFAULT_DB_URL) -> Session:
    """Get a new database session. The caller closes it."""
    return sessionmaker(bind=create_db_engine(db_url))()


@contextmanager
def session_scope(db_url: str = DEFAULT_DB_URL) -> Iterator[Session]:
    """Session that is rolled back on error and always closed."""
    session = get_session(db_url)
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def reset_database(db_url: str = DEFAULT_DB_URL) -> None:
    """Drop all tables and recreate them (deletes every stored rule and run)."""
    engine = create_db_engine(db_url)
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    logger.warning("Database reset: %s", db_url)
