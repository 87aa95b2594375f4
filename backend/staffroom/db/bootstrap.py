from __future__ import annotations

import logging

from sqlalchemy import inspect, text

import staffroom.models  # noqa: F401
from staffroom.db.base import Base
from staffroom.db.session import engine

logger = logging.getLogger(__name__)

REALLOCATION_OCCURRENCE_COLUMNS = ["timetable_slot_id", "reallocation_date"]

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "faculty": {"id", "department_id", "is_active", "lab_qualified", "max_periods_per_day"},
    "faculty_subjects": {"faculty_id", "subject_id"},
    "subjects": {"id", "department_id", "is_lab"},
    "timetable_slots": {"id", "day_of_week", "period_number", "subject_id", "faculty_id", "is_lab"},
    "leave_requests": {"id", "faculty_id", "start_date", "end_date", "status"},
    "reallocations": {
        "id",
        "leave_request_id",
        "timetable_slot_id",
        "original_faculty_id",
        "substitute_faculty_id",
        "reallocation_date",
        "score",
        "status",
        "notes",
    },
    "users": {"id", "email", "role", "faculty_id"},
}


def _ensure_reallocation_occurrence_index() -> None:
    """Databases created before the (slot, date) uniqueness rule get it added as an index."""
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "reallocations" not in set(inspector.get_table_names()):
            return
        for constraint in inspector.get_unique_constraints("reallocations"):
            if constraint["column_names"] == REALLOCATION_OCCURRENCE_COLUMNS:
                return
        for index in inspector.get_indexes("reallocations"):
            if index.get("unique") and index["column_names"] == REALLOCATION_OCCURRENCE_COLUMNS:
                return
        logger.warning("Adding unique (timetable_slot_id, reallocation_date) index to reallocations")
        connection.execute(
            text(
                "CREATE UNIQUE INDEX uq_reallocations_slot_date "
                "ON reallocations (timetable_slot_id, reallocation_date)"
            )
        )


def _assert_required_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = [name for name in REQUIRED_COLUMNS if name not in table_names]
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")

        missing_columns: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            for column_name in sorted(required - existing):
                missing_columns.append(f"{table_name}.{column_name}")
        if missing_columns:
            raise RuntimeError(f"Missing required columns: {', '.join(missing_columns)}")


def ensure_runtime_schema_compatibility() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        _ensure_reallocation_occurrence_index()
        _assert_required_columns()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
