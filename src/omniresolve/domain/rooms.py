"""Application services for tracking rooms.

The room listing can be fronted by a key-value cache. Reads fall back to the
store on any cache problem, repopulate the cache in a detached task, and every
mutation invalidates the listing rather than updating it in place.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final

from omniresolve.domain.clock import utcnow
from omniresolve.domain.errors import CacheError
from omniresolve.domain.model import Room

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine

    from omniresolve.domain.clock import Clock
    from omniresolve.domain.ports import KeyValueCache, Omnichannel, RoomUnitOfWork

    UnitOfWorkFactory = Callable[[], RoomUnitOfWork]

log = getLogger(__name__)

ROOMS_CACHE_KEY: Final[str] = "rooms"
ROOMS_CACHE_TTL_SECONDS: Final[int] = 600

_background_tasks: set[asyncio.Task[None]] = set()


async def list_rooms(
    unit_of_work_factory: UnitOfWorkFactory,
    cache: KeyValueCache | None = None,
    *,
    ttl_seconds: int = ROOMS_CACHE_TTL_SECONDS,
) -> list[Room]:
    """Return every tracked room, from the cache when it holds a usable listing."""

    if cache is not None:
        cached = await _read_cached_rooms(cache)
        if cached is not None:
            return cached

    with unit_of_work_factory() as uow:
        rooms = uow.repositories.rooms.fetch()

    if cache is not None:
        _spawn(_repopulate(cache, encode_rooms(rooms), ttl_seconds), name="rooms-cache-fill")
    return rooms


async def invalidate_room_listing(cache: KeyValueCache) -> bool:
    """Drop the cached listing. Failures are logged and reported as ``False``."""

    try:
        await cache.delete(ROOMS_CACHE_KEY)
    except CacheError as exc:
        log.error("Failed to clear cache key %s: %s", ROOMS_CACHE_KEY, exc)
        return False
    return True


async def register_room(
    room_id: str,
    *,
    omnichannel: Omnichannel,
    unit_of_work_factory: UnitOfWorkFactory,
    cache: KeyValueCache | None = None,
    clock: Clock = utcnow,
) -> Room:
    """Tag a newly opened room upstream and start tracking it locally."""

    await omnichannel.tag_room(room_id, room_id)

    room = Room(multichannel_room_id=room_id, created_at=clock())
    with unit_of_work_factory() as uow:
        uow.repositories.rooms.save(room)
        uow.commit()
    log.info("Tracking room %s (id=%s)", room_id, room.id)

    if cache is not None:
        await invalidate_room_listing(cache)
    return room


def get_room(room_id: int, *, unit_of_work_factory: UnitOfWorkFactory) -> Room:
    with unit_of_work_factory() as uow:
        return uow.repositories.rooms.find_by_id(room_id)


def encode_rooms(rooms: list[Room]) -> str:
    return json.dumps(
        [
            {
                "id": room.id,
                "multichannel_room_id": room.multichannel_room_id,
                "created_at": room.created_at.isoformat(),
                "updated_at": room.updated_at.isoformat() if room.updated_at else None,
            }
            for room in rooms
        ],
        separators=(",", ":"),
    )


def decode_rooms(payload: str) -> list[Room]:
    """Inverse of ``encode_rooms``; raises ``ValueError`` on malformed payloads."""

    loaded = json.loads(payload)
    if not isinstance(loaded, list):
        raise ValueError("Cached room listing is not a list")  # noqa: TRY004
    rooms: list[Room] = []
    try:
        for item in loaded:
            updated_at = item.get("updated_at")
            rooms.append(
                Room(
                    id=item["id"],
                    multichannel_room_id=item["multichannel_room_id"],
                    created_at=datetime.fromisoformat(item["created_at"]),
                    updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
                )
            )
    except (AttributeError, KeyError, TypeError) as exc:
        raise ValueError("Malformed cached room entry") from exc
    return rooms


async def drain_background_tasks() -> None:
    """Wait for pending cache refills (used on shutdown and in tests)."""

    while _background_tasks:
        await asyncio.gather(*tuple(_background_tasks), return_exceptions=True)


async def _read_cached_rooms(cache: KeyValueCache) -> list[Room] | None:
    try:
        payload = await cache.get(ROOMS_CACHE_KEY)
    except CacheError as exc:
        log.warning("Room cache unavailable, reading from store: %s", exc)
        return None
    if payload is None:
        return None
    try:
        return decode_rooms(payload)
    except ValueError as exc:
        log.warning("Ignoring unreadable room cache entry: %s", exc)
        return None


async def _repopulate(cache: KeyValueCache, payload: str, ttl_seconds: int) -> None:
    try:
        await cache.set(ROOMS_CACHE_KEY, payload, ttl_seconds)
    except CacheError as exc:
        log.error("Unable to set cache key %s: %s", ROOMS_CACHE_KEY, exc)


def _spawn(coro: Coroutine[object, object, None], *, name: str) -> None:
    task = asyncio.create_task(coro, name=name)
    _background_tasks.add(task)
    task.add_done_callback(_on_background_done)


def _on_background_done(task: asyncio.Task[None]) -> None:
    _background_tasks.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        log.error("Background task %s failed", task.get_name(), exc_info=exc)
