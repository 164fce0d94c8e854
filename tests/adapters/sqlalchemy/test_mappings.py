from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import create_engine, inspect, text

from omniresolve.adapters.sqlalchemy import mapper_registry, room_table, start_mappers
from omniresolve.adapters.sqlalchemy.migrations import upgrade_head
from omniresolve.domain.model import Room

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy.engine import Engine


def test_start_mappers_is_idempotent() -> None:
    assert start_mappers() is start_mappers()
    assert mapper_registry is start_mappers()


def test_room_is_mapped_to_room_table() -> None:
    start_mappers()

    mapper = inspect(Room)

    assert mapper.local_table is room_table
    assert set(mapper.columns.keys()) == {"id", "multichannel_room_id", "created_at", "updated_at"}


def test_migration_creates_indexed_room_table(sqlite_engine: Engine) -> None:
    inspector = inspect(sqlite_engine)

    assert {"room", "alembic_version"} <= set(inspector.get_table_names())
    indexes = {index["name"]: index["column_names"] for index in inspector.get_indexes("room")}
    assert indexes["ix_room_multichannel_room_id"] == ["multichannel_room_id"]


def test_upgrade_head_from_database_uri_is_repeatable(tmp_path: Path) -> None:
    database_uri = f"sqlite+pysqlite:///{tmp_path / 'rooms.db'}"

    upgrade_head(database_uri=database_uri)
    upgrade_head(database_uri=database_uri)

    engine = create_engine(database_uri)
    try:
        with engine.connect() as connection:
            revision = connection.execute(text("SELECT version_num FROM alembic_version")).scalar()
        assert "room" in inspect(engine).get_table_names()
    finally:
        engine.dispose()
    assert revision == "0001_create_room"
