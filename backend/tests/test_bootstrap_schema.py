import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from timetable.db import bootstrap


def memory_engine():
    return create_engine("sqlite+pysqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)


def test_ensure_schema_creates_tables():
    engine = memory_engine()
    bootstrap.ensure_schema(engine)
    assert bootstrap.missing_schema(engine) == ([], {})


def test_missing_columns_are_reported():
    engine = memory_engine()
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE schedule_entries (id VARCHAR(36) PRIMARY KEY, teacher_id VARCHAR(36))"))

    missing_tables, missing_columns = bootstrap.missing_schema(engine)
    assert missing_tables == ["activity_logs", "subjects"]
    assert "room_key" in missing_columns["schedule_entries"]


def test_ensure_schema_refuses_an_incompatible_table():
    engine = memory_engine()
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE schedule_entries (id VARCHAR(36) PRIMARY KEY)"))

    with pytest.raises(RuntimeError, match="Missing required columns"):
        bootstrap.ensure_schema(engine)
