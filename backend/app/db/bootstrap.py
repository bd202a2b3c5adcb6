from __future__ import annotations

import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

import app.models  # noqa: F401
from app.db.base import Base
from app.db.session import engine as default_engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "courses": {"id", "code", "name", "credits", "level", "department"},
    "course_sections": {"id", "course_id", "section_code", "instructor", "room", "capacity", "position"},
    "section_meetings": {"id", "section_id", "day", "start_time", "end_time", "position"},
    "rooms": {"id", "room_number", "capacity"},
}


def missing_schema_parts(engine: Engine) -> tuple[list[str], dict[str, list[str]]]:
    missing_tables: list[str] = []
    missing_columns: dict[str, list[str]] = {}
    with engine.connect() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        for table_name, columns in REQUIRED_COLUMNS.items():
            if table_name not in table_names:
                missing_tables.append(table_name)
                continue
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            missing = sorted(columns - existing)
            if missing:
                missing_columns[table_name] = missing
    return missing_tables, missing_columns


def _ensure_section_position_column(engine: Engine) -> None:
    # Catalogs created before ordered sections existed lack this column.
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "course_sections" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("course_sections")}
        if "position" in column_names:
            return
        connection.execute(text("ALTER TABLE course_sections ADD COLUMN position INTEGER NOT NULL DEFAULT 0"))


def ensure_runtime_schema_compatibility(engine: Engine | None = None) -> None:
    engine = engine or default_engine
    try:
        Base.metadata.create_all(bind=engine)
        _ensure_section_position_column(engine)
        missing_tables, missing_columns = missing_schema_parts(engine)
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")
        if missing_columns:
            formatted = [f"{table}.{column}" for table, columns in missing_columns.items() for column in columns]
            raise RuntimeError(f"Missing required columns: {', '.join(formatted)}")
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
