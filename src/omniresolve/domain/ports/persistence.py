"""Ports for persisting domain aggregates."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from omniresolve.domain.model import Room


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def save(self, entity: TEntity) -> None: ...


@runtime_checkable
class RoomRepository(Repository[Room], Protocol):
    """Persistence contract for tracked rooms.

    Storage failures surface as ``StorageError``; point lookups that miss raise
    ``RoomNotFoundError``.
    """

    def fetch(self) -> list[Room]: ...

    def find_by_id(self, room_id: int) -> Room: ...

    def delete_by(self, **filters: object) -> None: ...
