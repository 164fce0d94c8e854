from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from omniresolve.domain.errors import ReconciliationError
from omniresolve.domain.reconciliation import AgePolicy, ReconciliationEngine
from omniresolve.domain.rooms import ROOMS_CACHE_KEY, drain_background_tasks, encode_rooms
from tests.helpers.rooms import NOW, FakeOmnichannel, make_room

if TYPE_CHECKING:
    from collections.abc import Callable

    from omniresolve.adapters.sqlalchemy import SqlAlchemyRoomUnitOfWork
    from omniresolve.app import UnitOfWorkFactory
    from tests.helpers.rooms import FakeUnitOfWorkFactory, InMemoryCache


def _engine(
    uow: UnitOfWorkFactory,
    omnichannel: FakeOmnichannel,
    *,
    policy: AgePolicy | None = None,
    cache: InMemoryCache | None = None,
) -> ReconciliationEngine:
    return ReconciliationEngine(
        unit_of_work_factory=uow,
        omnichannel=omnichannel,
        policy=policy or AgePolicy(),
        cache=cache,
        clock=lambda: NOW,
    )


def _seed(fake_uow: FakeUnitOfWorkFactory, *ages_by_room: tuple[str, int]) -> None:
    for room_id, minutes in ages_by_room:
        fake_uow.repository.save(make_room(room_id, age=timedelta(minutes=minutes)))


@pytest.mark.anyio
async def test_tick_resolves_and_deletes_aged_rooms(
    fake_uow: FakeUnitOfWorkFactory, fake_omnichannel: FakeOmnichannel
) -> None:
    _seed(fake_uow, ("old-a", 30), ("old-b", 11))

    result = await _engine(fake_uow, fake_omnichannel).run_tick()

    assert fake_omnichannel.resolved == ["old-a", "old-b"]
    assert fake_uow.repository.rooms == []
    assert (result.examined, result.resolved, result.deleted) == (2, 2, 2)
    assert not result.stopped_early
    assert fake_uow.commits == 2


@pytest.mark.anyio
async def test_tick_stops_at_first_young_room(
    fake_uow: FakeUnitOfWorkFactory, fake_omnichannel: FakeOmnichannel
) -> None:
    _seed(fake_uow, ("old", 20), ("young", 2), ("old-after-young", 30))

    result = await _engine(fake_uow, fake_omnichannel).run_tick()

    assert fake_omnichannel.resolved == ["old"]
    assert [room.multichannel_room_id for room in fake_uow.repository.rooms] == [
        "young",
        "old-after-young",
    ]
    assert result.stopped_early
    assert result.examined == 2


@pytest.mark.anyio
async def test_young_first_room_ends_tick_without_side_effects(
    fake_uow: FakeUnitOfWorkFactory, fake_omnichannel: FakeOmnichannel
) -> None:
    _seed(fake_uow, ("young", 2), ("old", 30))

    result = await _engine(fake_uow, fake_omnichannel).run_tick()

    assert fake_omnichannel.resolved == []
    assert fake_uow.repository.delete_calls == []
    assert result.stopped_early
    assert (result.examined, result.resolved, result.deleted) == (1, 0, 0)


@pytest.mark.anyio
async def test_young_first_room_leaves_cache_untouched(
    fake_uow: FakeUnitOfWorkFactory,
    fake_omnichannel: FakeOmnichannel,
    memory_cache: InMemoryCache,
) -> None:
    _seed(fake_uow, ("young", 2), ("old", 30))

    result = await _engine(fake_uow, fake_omnichannel, cache=memory_cache).run_tick()
    await drain_background_tasks()

    assert fake_omnichannel.resolved == []
    assert fake_uow.repository.delete_calls == []
    assert memory_cache.deleted == []
    assert result.stopped_early


@pytest.mark.anyio
async def test_tick_skips_young_rooms_when_configured(
    fake_uow: FakeUnitOfWorkFactory, fake_omnichannel: FakeOmnichannel
) -> None:
    _seed(fake_uow, ("old", 20), ("young", 2), ("old-after-young", 30))
    policy = AgePolicy(stop_at_first_young=False)

    result = await _engine(fake_uow, fake_omnichannel, policy=policy).run_tick()

    assert fake_omnichannel.resolved == ["old", "old-after-young"]
    assert [room.multichannel_room_id for room in fake_uow.repository.rooms] == ["young"]
    assert result.examined == 3
    assert not result.stopped_early


@pytest.mark.anyio
async def test_empty_store_is_a_no_op(
    fake_uow: FakeUnitOfWorkFactory, fake_omnichannel: FakeOmnichannel
) -> None:
    result = await _engine(fake_uow, fake_omnichannel).run_tick()

    assert result.examined == 0
    assert fake_omnichannel.resolved == []
    assert fake_uow.repository.delete_calls == []


@pytest.mark.anyio
async def test_resolve_failure_keeps_room_and_continues(fake_uow: FakeUnitOfWorkFactory) -> None:
    _seed(fake_uow, ("broken", 30), ("fine", 20))
    omnichannel = FakeOmnichannel(failing={"broken"})

    result = await _engine(fake_uow, omnichannel).run_tick()

    assert omnichannel.resolved == ["fine"]
    assert [room.multichannel_room_id for room in fake_uow.repository.rooms] == ["broken"]
    assert fake_uow.repository.delete_calls == [{"multichannel_room_id": "fine"}]
    assert (result.resolve_failed, result.resolved, result.deleted) == (1, 1, 1)


@pytest.mark.anyio
async def test_delete_failure_is_counted_and_tick_continues(
    fake_uow: FakeUnitOfWorkFactory, fake_omnichannel: FakeOmnichannel
) -> None:
    _seed(fake_uow, ("sticky", 30), ("fine", 20))
    fake_uow.repository.fail_delete_for.add("sticky")

    result = await _engine(fake_uow, fake_omnichannel).run_tick()

    assert fake_omnichannel.resolved == ["sticky", "fine"]
    assert (result.resolved, result.deleted, result.delete_failed) == (2, 1, 1)
    assert [room.multichannel_room_id for room in fake_uow.repository.rooms] == ["sticky"]


@pytest.mark.anyio
async def test_unreadable_store_aborts_tick(
    fake_uow: FakeUnitOfWorkFactory, fake_omnichannel: FakeOmnichannel
) -> None:
    _seed(fake_uow, ("old", 30))
    fake_uow.repository.fail_fetch = True

    with pytest.raises(ReconciliationError):
        await _engine(fake_uow, fake_omnichannel).run_tick()

    assert fake_omnichannel.resolved == []


@pytest.mark.anyio
async def test_cache_is_invalidated_after_each_delete(
    fake_uow: FakeUnitOfWorkFactory,
    fake_omnichannel: FakeOmnichannel,
    memory_cache: InMemoryCache,
) -> None:
    _seed(fake_uow, ("old-a", 30), ("old-b", 20))

    await _engine(fake_uow, fake_omnichannel, cache=memory_cache).run_tick()
    await drain_background_tasks()

    assert memory_cache.deleted == [ROOMS_CACHE_KEY, ROOMS_CACHE_KEY]


@pytest.mark.anyio
async def test_rooms_are_read_from_cache_when_present(
    fake_uow: FakeUnitOfWorkFactory,
    fake_omnichannel: FakeOmnichannel,
    memory_cache: InMemoryCache,
) -> None:
    cached = [make_room("cached-old", age=timedelta(minutes=30), id=7)]
    memory_cache.values[ROOMS_CACHE_KEY] = encode_rooms(cached)

    result = await _engine(fake_uow, fake_omnichannel, cache=memory_cache).run_tick()

    assert fake_omnichannel.resolved == ["cached-old"]
    assert fake_uow.repository.delete_calls == [{"multichannel_room_id": "cached-old"}]
    assert result.deleted == 1


@pytest.mark.anyio
async def test_broken_cache_falls_back_to_store(
    fake_uow: FakeUnitOfWorkFactory,
    fake_omnichannel: FakeOmnichannel,
    memory_cache: InMemoryCache,
) -> None:
    _seed(fake_uow, ("old", 30))
    memory_cache.broken = True

    result = await _engine(fake_uow, fake_omnichannel, cache=memory_cache).run_tick()
    await drain_background_tasks()

    assert fake_omnichannel.resolved == ["old"]
    assert result.deleted == 1


@pytest.mark.anyio
async def test_tick_against_sqlite_store(
    sqlite_unit_of_work: Callable[[], SqlAlchemyRoomUnitOfWork],
    fake_omnichannel: FakeOmnichannel,
) -> None:
    with sqlite_unit_of_work() as uow:
        for room_id, minutes in (("dup", 30), ("dup", 25), ("young", 1)):
            uow.repositories.rooms.save(make_room(room_id, age=timedelta(minutes=minutes)))
        uow.commit()

    result = await _engine(sqlite_unit_of_work, fake_omnichannel).run_tick()

    # Deleting by platform id removes both "dup" rows; the second pass over it is a no-op.
    assert fake_omnichannel.resolved == ["dup", "dup"]
    with sqlite_unit_of_work() as uow:
        remaining = uow.repositories.rooms.fetch()
    assert [room.multichannel_room_id for room in remaining] == ["young"]
    assert result.stopped_early
