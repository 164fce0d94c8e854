"""SQLAlchemy adapter package for omniresolve."""

from __future__ import annotations

from .mappings import mapper_registry, room_table, start_mappers
from .repositories import SqlAlchemyRoomRepository
from .unit_of_work import (
    SqlAlchemyRoomUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    ping_database,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyRoomRepository",
    "SqlAlchemyRoomUnitOfWork",
    "StartupError",
    "configured_engine",
    "is_started",
    "mapper_registry",
    "ping_database",
    "room_table",
    "shutdown",
    "start_mappers",
    "startup",
]
