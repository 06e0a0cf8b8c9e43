"""Tests for database engine and session helpers."""
from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

from sqlalchemy import inspect

from hockey_stats.data.db import (
    create_db_engine,
    create_session_factory,
    init_db,
    missing_tables,
    reset_engine,
    session_scope,
    verify_foreign_keys_enabled,
)
from hockey_stats.data.models import ALL_MODELS, Team


class TestCreateDbEngine:
    """Tests for create_db_engine."""

    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        """Should create the directory of a file-backed database."""
        engine = create_db_engine(f"sqlite:///{tmp_path / 'nested' / 'hockey.db'}")
        init_db(engine)

        assert (tmp_path / "nested" / "hockey.db").exists()
        engine.dispose()

    def test_enables_foreign_keys(self, engine) -> None:
        """SQLite connections should enforce foreign keys."""
        assert verify_foreign_keys_enabled(engine)

    def test_foreign_keys_off_detected(self, tmp_path: Path) -> None:
        """A SQLite engine without the pragma should be reported."""
        from sqlalchemy import create_engine

        engine = create_engine(f"sqlite:///{tmp_path / 'plain.db'}")

        assert not verify_foreign_keys_enabled(engine)
        engine.dispose()

    def test_other_dialects_trusted(self) -> None:
        """Non-SQLite engines should not be queried."""
        engine = MagicMock()
        engine.dialect.name = "postgresql"

        assert verify_foreign_keys_enabled(engine)
        engine.connect.assert_not_called()


class TestInitDb:
    """Tests for init_db and missing_tables."""

    def test_creates_all_nine_tables(self, engine) -> None:
        """Every model table should exist after init_db."""
        tables = set(inspect(engine).get_table_names())

        assert len(ALL_MODELS) == 9
        assert {m.__tablename__ for m in ALL_MODELS} <= tables

    def test_missing_tables_empty_after_init(self, engine) -> None:
        """missing_tables should report nothing on a complete schema."""
        assert missing_tables(engine) == []

    def test_missing_tables_on_empty_database(self, tmp_path: Path) -> None:
        """missing_tables should list every table of a blank database in order."""
        engine = create_db_engine(f"sqlite:///{tmp_path / 'blank.db'}")

        assert missing_tables(engine) == [m.__tablename__ for m in ALL_MODELS]
        engine.dispose()

    def test_init_db_is_repeatable(self, engine) -> None:
        """Calling init_db twice should not fail."""
        init_db(engine)

        assert missing_tables(engine) == []


class TestSessions:
    """Tests for session factories."""

    def test_rows_usable_after_session_closes(self, session_factory) -> None:
        """expire_on_commit is off, so attributes survive the commit."""
        with session_factory() as session, session.begin():
            team = Team(id=15, name="Washington Capitals", abbreviation="WSH", city="Washington")
            session.add(team)

        assert team.abbreviation == "WSH"

    def test_session_scope_uses_settings_database(self, test_settings) -> None:
        """session_scope should commit to the configured database file."""
        reset_engine()
        try:
            init_db()
            with session_scope() as session:
                session.add(Team(id=3, name="New York Rangers", abbreviation="NYR", city="New York"))
            with session_scope() as session:
                assert session.get(Team, 3) is not None
            assert test_settings.db_path_obj.exists()
        finally:
            reset_engine()

    def test_create_session_factory_binds_engine(self, engine) -> None:
        """Sessions from the factory should use the given engine."""
        factory = create_session_factory(engine)

        with factory() as session:
            assert session.get_bind() is engine
