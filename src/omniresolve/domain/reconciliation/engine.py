"""Periodic sweep that resolves and forgets aged rooms.

One tick lists the tracked rooms, resolves every room the policy marks as due
on the omnichannel platform and deletes its local record. Per-room failures are
logged and counted; only an unreadable room set aborts the tick. Resolution and
deletion are not atomic: a room resolved upstream whose delete fails is
resolved again on the next tick.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from omniresolve.domain.clock import utcnow
from omniresolve.domain.errors import ExternalServiceError, ReconciliationError, StorageError
from omniresolve.domain.rooms import ROOMS_CACHE_TTL_SECONDS, invalidate_room_listing, list_rooms

from .policy import AgePolicy

if TYPE_CHECKING:
    from collections.abc import Callable

    from omniresolve.domain.clock import Clock
    from omniresolve.domain.model import Room
    from omniresolve.domain.ports import KeyValueCache, Omnichannel, RoomUnitOfWork

log = getLogger(__name__)


@dataclass(slots=True)
class ReconciliationResult:
    examined: int = 0
    resolved: int = 0
    deleted: int = 0
    resolve_failed: int = 0
    delete_failed: int = 0
    stopped_early: bool = False

    def summary(self) -> str:
        return (
            f"examined={self.examined} resolved={self.resolved} deleted={self.deleted} "
            f"resolve_failed={self.resolve_failed} delete_failed={self.delete_failed} "
            f"stopped_early={self.stopped_early}"
        )


@dataclass(slots=True)
class ReconciliationEngine:
    """Resolve rooms that have been open longer than the policy allows."""

    unit_of_work_factory: Callable[[], RoomUnitOfWork]
    omnichannel: Omnichannel
    policy: AgePolicy = field(default_factory=AgePolicy)
    cache: KeyValueCache | None = None
    clock: Clock = utcnow
    cache_ttl_seconds: int = ROOMS_CACHE_TTL_SECONDS

    async def run_tick(self) -> ReconciliationResult:
        """Run one sweep over the tracked rooms.

        Raises ``ReconciliationError`` when the room set cannot be read, before
        any side effect happens.
        """

        try:
            rooms = await list_rooms(
                self.unit_of_work_factory,
                self.cache,
                ttl_seconds=self.cache_ttl_seconds,
            )
        except StorageError as exc:
            raise ReconciliationError("Unable to list rooms for reconciliation") from exc

        result = ReconciliationResult()
        now = self.clock()
        for room in rooms:
            result.examined += 1
            if not self.policy.is_due(room, now):
                if self.policy.stop_at_first_young:
                    result.stopped_early = True
                    break
                continue

            if not await self._resolve(room, result):
                continue
            if self._delete(room, result) and self.cache is not None:
                await invalidate_room_listing(self.cache)

        log.info("Reconciliation tick finished: %s", result.summary())
        return result

    async def _resolve(self, room: Room, result: ReconciliationResult) -> bool:
        try:
            await self.omnichannel.resolve_room(room.multichannel_room_id)
        except ExternalServiceError as exc:
            result.resolve_failed += 1
            log.error("Failed to resolve room %s: %s", room.multichannel_room_id, exc)
            return False
        result.resolved += 1
        return True

    def _delete(self, room: Room, result: ReconciliationResult) -> bool:
        try:
            with self.unit_of_work_factory() as uow:
                uow.repositories.rooms.delete_by(multichannel_room_id=room.multichannel_room_id)
                uow.commit()
        except StorageError as exc:
            result.delete_failed += 1
            log.error("Failed to delete room %s: %s", room.multichannel_room_id, exc)
            return False
        result.deleted += 1
        log.info("Resolved room %s", room.multichannel_room_id)
        return True
