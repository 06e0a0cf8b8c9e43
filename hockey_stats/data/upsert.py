"""Idempotent insert-or-update writes keyed by each model's natural key.

SQLite and PostgreSQL get a single ``INSERT .. ON CONFLICT DO UPDATE``
statement; other dialects fall back to select-then-insert-or-update inside
the same unit of work. Either way only the supplied columns are written, so
a row carrying a subset of columns (season aggregates, advanced metrics)
leaves the rest of the stored row untouched.

Example:
    >>> upserter = Upserter(session_factory)
    >>> upserter.upsert(Team, {"id": 15, "name": "Washington Capitals", ...})
    >>> upserter.upsert_many(PlayerGameStat, rows)  # one transaction
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from hockey_stats.data.schema import Base
from hockey_stats.types import PersistenceError, Row

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class Upserter:
    """Upsert executor.

    Every public call is one unit of work: a session is opened, its
    statements run, and it is committed (or rolled back) and closed before
    returning.

    Attributes:
        session_factory: Factory for short-lived sessions.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def upsert(self, model: type[Base], row: Row) -> None:
        """Insert ``row`` or overwrite the supplied columns of its match.

        Raises:
            PersistenceError: If the statement fails.
        """
        self.upsert_many(model, [row])

    def upsert_many(self, model: type[Base], rows: Sequence[Row]) -> int:
        """Upsert several rows in a single transaction.

        Any failure rolls back the whole batch.

        Returns:
            Number of rows written.

        Raises:
            PersistenceError: If any statement fails.
        """
        if not rows:
            return 0
        current: Row = rows[0]
        try:
            with self.session_factory() as session, session.begin():
                for current in rows:
                    self._write(session, model, current, overwrite=True)
        except SQLAlchemyError as e:
            raise self._failure(model, current, e) from e
        return len(rows)

    def upsert_scope(self, model: type[Base], where: dict[str, Any], rows: Sequence[Row]) -> int:
        """Make ``rows`` the complete contents of the ``where`` scope.

        Rows are upserted as in ``upsert_many``, then stored rows matching
        ``where`` whose natural key is not among ``rows`` are deleted, all
        in one transaction. Columns not supplied on surviving rows are kept.

        Returns:
            Number of rows written.

        Raises:
            PersistenceError: If any statement fails.
        """
        key = model.__natural_key__
        keep = {tuple(row.get(k) for k in key) for row in rows}
        current: Row = dict(where)
        try:
            with self.session_factory() as session, session.begin():
                for current in rows:
                    self._write(session, model, current, overwrite=True)
                current = dict(where)
                table = model.__table__
                stored = session.execute(
                    select(*(table.c[k] for k in key)).where(
                        *(table.c[column] == value for column, value in where.items())
                    )
                ).all()
                stale = [tuple(found) for found in stored if tuple(found) not in keep]
                for stale_key in stale:
                    session.execute(delete(model).filter_by(**dict(zip(key, stale_key))))
        except SQLAlchemyError as e:
            raise self._failure(model, current, e) from e
        if stale:
            logger.info(f"Removed {len(stale)} stale {model.__tablename__} rows for {where}")
        return len(rows)

    def ensure(self, model: type[Base], row: Row) -> None:
        """Insert ``row`` only if no row with its natural key exists."""
        try:
            with self.session_factory() as session, session.begin():
                self._write(session, model, row, overwrite=False)
        except SQLAlchemyError as e:
            raise self._failure(model, row, e) from e

    def replace(self, model: type[Base], where: dict[str, Any], rows: Sequence[Row]) -> int:
        """Delete rows matching ``where`` and insert ``rows``, atomically.

        Used for tables without a natural key, where re-ingesting a parent
        (a game's play-by-play) must not duplicate children.

        Returns:
            Number of rows inserted.
        """
        try:
            with self.session_factory() as session, session.begin():
                session.execute(delete(model).filter_by(**where))
                if rows:
                    session.execute(model.__table__.insert(), list(rows))
        except SQLAlchemyError as e:
            raise self._failure(model, where, e) from e
        return len(rows)

    def update_where(self, model: type[Base], where: dict[str, Any], values: Row) -> int:
        """Overwrite ``values`` on existing rows matching ``where``.

        Never inserts. Used to attach metrics to rows another stage owns.

        Returns:
            Number of rows updated.
        """
        if not values:
            return 0
        changes = dict(values)
        if "updated_at" in model.__table__.c:
            changes["updated_at"] = func.now()
        try:
            with self.session_factory() as session, session.begin():
                result = session.execute(
                    update(model).filter_by(**where).values(**changes)
                )
                updated = result.rowcount or 0
        except SQLAlchemyError as e:
            raise self._failure(model, where, e) from e
        return updated

    # -------------------------------------------------------------------------
    # Strategies
    # -------------------------------------------------------------------------

    def _write(self, session: Session, model: type[Base], row: Row, overwrite: bool) -> None:
        key = model.__natural_key__
        missing = [k for k in key if row.get(k) is None]
        if missing:
            raise ValueError(f"{model.__tablename__} row lacks key columns {missing}")

        insert = _DIALECT_INSERTS.get(session.get_bind().dialect.name)
        if insert is not None:
            self._write_on_conflict(session, insert, model, row, key, overwrite)
        else:
            self._write_check_then_set(session, model, row, key, overwrite)

    def _write_on_conflict(
        self,
        session: Session,
        insert: Any,
        model: type[Base],
        row: Row,
        key: tuple[str, ...],
        overwrite: bool,
    ) -> None:
        stmt = insert(model).values(**row)
        changes = {c: stmt.excluded[c] for c in row if c not in key}
        if overwrite and changes:
            if "updated_at" in model.__table__.c:
                changes["updated_at"] = func.now()
            stmt = stmt.on_conflict_do_update(index_elements=list(key), set_=changes)
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=list(key))
        session.execute(stmt)

    def _write_check_then_set(
        self,
        session: Session,
        model: type[Base],
        row: Row,
        key: tuple[str, ...],
        overwrite: bool,
    ) -> None:
        existing = session.execute(
            select(model).filter_by(**{k: row[k] for k in key})
        ).scalar_one_or_none()
        if existing is None:
            session.add(model(**row))
        elif overwrite:
            for column, value in row.items():
                setattr(existing, column, value)
        session.flush()

    def _failure(self, model: type[Base], row: Row, error: Exception) -> PersistenceError:
        key = {k: row.get(k) for k in model.__natural_key__ if k in row} or row
        logger.error(f"Write to {model.__tablename__} failed for {key}: {error}")
        return PersistenceError(model.__tablename__, key, error)
