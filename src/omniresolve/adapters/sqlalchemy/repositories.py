"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from omniresolve.adapters.sqlalchemy.mappings import room_table
from omniresolve.domain.clock import utcnow
from omniresolve.domain.errors import RoomNotFoundError, StorageError
from omniresolve.domain.model import Room

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from omniresolve.domain.clock import Clock


class SqlAlchemyRoomRepository:
    def __init__(self, session: Session, *, clock: Clock = utcnow) -> None:
        self.session = session
        self._clock = clock

    def fetch(self) -> list[Room]:
        """Return all rooms, oldest first."""

        stmt = select(Room).order_by(room_table.c.id.asc())
        try:
            return list(self.session.scalars(stmt))
        except SQLAlchemyError as exc:
            raise StorageError("fetch") from exc

    def find_by_id(self, room_id: int) -> Room:
        try:
            room = self.session.get(Room, room_id)
        except SQLAlchemyError as exc:
            raise StorageError("find_by_id") from exc
        if room is None:
            raise RoomNotFoundError(room_id)
        return room

    def save(self, entity: Room) -> None:
        entity.updated_at = self._clock()
        try:
            if entity.id is None:
                self.session.add(entity)
            else:
                self.session.merge(entity)
            self.session.flush()
        except SQLAlchemyError as exc:
            raise StorageError("save") from exc

    def delete_by(self, **filters: object) -> None:
        """Delete every room matching all ``filters`` (column name to value)."""

        if not filters:
            raise ValueError("delete_by requires at least one filter")
        unknown = sorted(set(filters) - set(room_table.c.keys()))
        if unknown:
            raise ValueError(f"Unknown room columns: {', '.join(unknown)}")

        stmt = delete(room_table).where(
            *(room_table.c[name] == value for name, value in filters.items())
        )
        try:
            self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StorageError("delete_by") from exc


if TYPE_CHECKING:
    from omniresolve.domain.ports import RoomRepository

    def _check(session: Session) -> RoomRepository:
        return SqlAlchemyRoomRepository(session)
