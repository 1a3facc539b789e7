"""Tests for the ORM schema and engine setup.

Covers:
- All tables are created and the schema version is recorded
- SQLite pragmas (foreign keys, busy timeout)
- Branch name uniqueness enforced by the database
- Timestamps always load as UTC-aware datetimes
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import inspect, select, text
from sqlalchemy.exc import IntegrityError

from termtrack.storage.engine import SCHEMA_VERSION, create_termtrack_engine, init_db
from termtrack.storage.schema import BranchRow, ProjectRow, TermTrackMetaRow


class TestTableCreation:
    def test_all_tables_exist(self, engine):
        inspector = inspect(engine)
        table_names = set(inspector.get_table_names())
        expected = {
            "projects",
            "branches",
            "commits",
            "users",
            "team_memberships",
            "_termtrack_meta",
        }
        assert expected <= table_names, f"Missing tables: {expected - table_names}"

    def test_meta_has_schema_version(self, session):
        row = session.execute(
            select(TermTrackMetaRow).where(TermTrackMetaRow.key == "schema_version")
        ).scalar_one_or_none()
        assert row is not None
        assert row.value == SCHEMA_VERSION

    def test_init_db_is_idempotent(self, engine):
        init_db(engine)
        with engine.connect() as conn:
            count = conn.execute(text("SELECT COUNT(*) FROM _termtrack_meta")).scalar_one()
        assert count == 1


class TestSqlitePragmas:
    def test_foreign_keys_enabled(self, session):
        assert session.execute(text("PRAGMA foreign_keys")).scalar_one() == 1

    def test_busy_timeout(self, tmp_path):
        eng = create_termtrack_engine(str(tmp_path / "t.db"), busy_timeout_ms=1234)
        try:
            with eng.connect() as conn:
                assert conn.execute(text("PRAGMA busy_timeout")).scalar_one() == 1234
        finally:
            eng.dispose()


class TestBranchConstraints:
    def test_unique_branch_name_per_project(self, session):
        now = datetime.now(timezone.utc)
        session.add(
            ProjectRow(
                id="p1",
                name="P",
                languages_json=[],
                default_language_code="",
                current_branch_name="main",
                created_at=now,
                updated_at=now,
            )
        )
        session.flush()
        session.add(BranchRow(project_id="p1", name="dev", working_terms=[], created_at=now))
        session.flush()
        session.add(BranchRow(project_id="p1", name="dev", working_terms=[], created_at=now))
        with pytest.raises(IntegrityError):
            session.flush()

    def test_branch_requires_existing_project(self, session):
        session.add(
            BranchRow(
                project_id="missing",
                name="main",
                working_terms=[],
                created_at=datetime.now(timezone.utc),
            )
        )
        with pytest.raises(IntegrityError):
            session.flush()


class TestTimestamps:
    def test_loaded_as_utc(self, session):
        cet = timezone(timedelta(hours=1))
        written = datetime(2024, 3, 1, 13, 30, tzinfo=cet)
        session.add(
            ProjectRow(
                id="p1",
                name="P",
                languages_json=[],
                default_language_code="",
                current_branch_name="main",
                created_at=written,
                updated_at=written,
            )
        )
        session.flush()
        session.expire_all()

        loaded = session.get(ProjectRow, "p1").created_at
        assert loaded == datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)
        assert loaded.utcoffset() == timedelta(0)
