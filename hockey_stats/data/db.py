"""Database engine and session management utilities.

Pipeline components never reach for a global engine: they are constructed
with a ``sessionmaker`` built by :func:`create_session_factory`. The
settings-backed ``get_engine``/``session_scope`` helpers exist for the CLI.

Example:
    >>> from hockey_stats.data.db import create_db_engine, create_session_factory, init_db
    >>> engine = create_db_engine("sqlite:///data/hockey.db")
    >>> init_db(engine)
    >>> session_factory = create_session_factory(engine)
"""
from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import Engine, create_engine, event, inspect, text
from sqlalchemy.orm import Session, scoped_session, sessionmaker

from hockey_stats.config import get_settings
from hockey_stats.data.schema import Base

logger = logging.getLogger(__name__)

# Settings-backed engine cache for the CLI
_engine: Engine | None = None
_session_factory: scoped_session[Session] | None = None


def _set_sqlite_pragmas(
    dbapi_connection: Any,
    connection_record: Any,
) -> None:
    """Set SQLite-specific pragmas for integrity and write throughput.

    Args:
        dbapi_connection: Raw DBAPI connection object.
        connection_record: Connection pool record (unused).
    """
    cursor = dbapi_connection.cursor()
    # Stats rows reference teams/players/games; enforce it
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine, applying SQLite pragmas when relevant.

    File-backed SQLite URLs get their parent directory created.

    Args:
        url: SQLAlchemy database URL.
        echo: Log every SQL statement.

    Returns:
        SQLAlchemy Engine instance.
    """
    engine = create_engine(url, echo=echo, pool_pre_ping=True)
    if engine.dialect.name == "sqlite":
        database = engine.url.database
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)
        event.listen(engine, "connect", _set_sqlite_pragmas)
    logger.debug(f"Created database engine: {engine.url}")
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Build the session factory handed to pipeline components.

    ``expire_on_commit`` is off so rows read inside a unit of work can be
    used after its session closes.
    """
    return sessionmaker(bind=engine, expire_on_commit=False)


def get_engine() -> Engine:
    """Get or create the engine for ``settings.db_path``.

    Returns:
        Cached SQLAlchemy Engine instance.
    """
    global _engine
    if _engine is None:
        _engine = create_db_engine(get_settings().db_url)
    return _engine


def get_session() -> Session:
    """Get a thread-local session bound to the settings engine.

    Returns:
        SQLAlchemy Session instance.
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = scoped_session(create_session_factory(get_engine()))
        logger.debug("Created scoped session factory")
    return _session_factory()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Context manager for database sessions with auto-commit/rollback.

    Yields:
        SQLAlchemy Session instance.

    Raises:
        Exception: Re-raises any exception after rollback.
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        logger.debug("Session rolling back due to exception")
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine | None = None) -> None:
    """Create all tables. Safe to call repeatedly.

    Args:
        engine: Target engine; defaults to the settings engine.
    """
    # Models must be imported so they register with Base.metadata
    from hockey_stats.data import models  # noqa: F401

    engine = engine if engine is not None else get_engine()
    Base.metadata.create_all(engine)
    logger.info("Database initialized - all tables created")


def missing_tables(engine: Engine) -> list[str]:
    """Return the names of model tables absent from the database.

    Args:
        engine: Engine to inspect.

    Returns:
        Table names in report order; empty when the schema is complete.
    """
    from hockey_stats.data.models import ALL_MODELS

    existing = set(inspect(engine).get_table_names())
    return [m.__tablename__ for m in ALL_MODELS if m.__tablename__ not in existing]


def reset_engine() -> None:
    """Reset the cached engine and session factory (for testing)."""
    global _engine, _session_factory
    if _session_factory is not None:
        _session_factory.remove()
        _session_factory = None
    if _engine is not None:
        _engine.dispose()
        _engine = None
    logger.debug("Database engine and session factory reset")


def verify_foreign_keys_enabled(engine: Engine) -> bool:
    """Check that SQLite enforces foreign keys on this engine's connections.

    Other dialects always enforce them, so they report True.
    """
    if engine.dialect.name != "sqlite":
        return True
    with engine.connect() as conn:
        row = conn.execute(text("PRAGMA foreign_keys")).fetchone()
        return row is not None and row[0] == 1
