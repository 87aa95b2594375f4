import pytest
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import StaticPool

from staffroom.db import bootstrap


def _raise_error(message: str):
    raise RuntimeError(message)


@pytest.fixture()
def bare_engine(monkeypatch):
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    monkeypatch.setattr(bootstrap, "engine", engine)
    yield engine
    engine.dispose()


def _occurrence_indexes(engine) -> list[dict]:
    return [
        index
        for index in inspect(engine).get_indexes("reallocations")
        if index["column_names"] == bootstrap.REALLOCATION_OCCURRENCE_COLUMNS
    ]


def test_runtime_schema_bootstrap_raises_on_validation_failure(monkeypatch):
    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: None)
    monkeypatch.setattr(bootstrap, "_ensure_reallocation_occurrence_index", lambda: None)
    monkeypatch.setattr(
        bootstrap,
        "_assert_required_columns",
        lambda: _raise_error("missing required schema"),
    )

    with pytest.raises(RuntimeError, match="Runtime schema compatibility bootstrap failed"):
        bootstrap.ensure_runtime_schema_compatibility()


def test_legacy_reallocations_table_gets_occurrence_index(bare_engine):
    with bare_engine.begin() as connection:
        connection.execute(
            text(
                "CREATE TABLE reallocations ("
                "id VARCHAR(36) PRIMARY KEY, "
                "timetable_slot_id VARCHAR(36) NOT NULL, "
                "reallocation_date DATE NOT NULL)"
            )
        )
    assert _occurrence_indexes(bare_engine) == []

    bootstrap._ensure_reallocation_occurrence_index()

    [index] = _occurrence_indexes(bare_engine)
    assert index["name"] == "uq_reallocations_slot_date"
    assert index["unique"]
    with bare_engine.begin() as connection:
        connection.execute(text("INSERT INTO reallocations VALUES ('a', 'slot-1', '2026-10-19')"))
    with pytest.raises(IntegrityError):
        with bare_engine.begin() as connection:
            connection.execute(text("INSERT INTO reallocations VALUES ('b', 'slot-1', '2026-10-19')"))


def test_occurrence_index_is_not_duplicated_on_current_schema(bare_engine):
    bootstrap.ensure_runtime_schema_compatibility()
    bootstrap._ensure_reallocation_occurrence_index()

    constraints = inspect(bare_engine).get_unique_constraints("reallocations")
    assert [item["column_names"] for item in constraints] == [bootstrap.REALLOCATION_OCCURRENCE_COLUMNS]
    assert _occurrence_indexes(bare_engine) == []


def test_missing_reallocations_table_is_left_to_create_all(bare_engine):
    bootstrap._ensure_reallocation_occurrence_index()

    assert "reallocations" not in inspect(bare_engine).get_table_names()
