from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

import timetable.models  # noqa: F401
from timetable.db.base import Base
from timetable.db.session import engine as default_engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "subjects": {"id", "code", "yearly_hours"},
    "schedule_entries": {
        "id",
        "class_id",
        "subject_id",
        "teacher_id",
        "day_of_week",
        "start_time",
        "end_time",
        "year",
        "half",
        "room",
        "room_key",
        "active",
    },
    "activity_logs": {"id", "action", "entity_id", "details"},
}


def missing_schema(bind: Engine) -> tuple[list[str], dict[str, list[str]]]:
    with bind.connect() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = sorted(name for name in REQUIRED_COLUMNS if name not in table_names)
        missing_columns: dict[str, list[str]] = {}
        for table_name, required in REQUIRED_COLUMNS.items():
            if table_name in missing_tables:
                continue
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            missing = sorted(required - existing)
            if missing:
                missing_columns[table_name] = missing
    return missing_tables, missing_columns


def ensure_schema(bind: Engine | None = None) -> None:
    bind = bind or default_engine
    try:
        Base.metadata.create_all(bind=bind)
        missing_tables, missing_columns = missing_schema(bind)
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Schema bootstrap failed")
        raise RuntimeError("Schema bootstrap failed") from exc
    if missing_tables:
        raise RuntimeError(f"Missing required tables: {', '.join(missing_tables)}")
    if missing_columns:
        flat = [f"{table}.{column}" for table, columns in missing_columns.items() for column in columns]
        raise RuntimeError(f"Missing required columns: {', '.join(flat)}")
