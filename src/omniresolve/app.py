"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from omniresolve.adapters.omnichannel import QiscusOmnichannel, parse_new_session_webhook
from omniresolve.adapters.redis_cache import build_cache
from omniresolve.adapters.sqlalchemy import (
    SqlAlchemyRoomUnitOfWork,
    StartupError,
    is_started,
    ping_database,
    startup,
)
from omniresolve.config import (
    ReconciliationConfig,
    get_cache_config,
    get_omnichannel_config,
    get_reconciliation_config,
)
from omniresolve.domain.clock import utcnow
from omniresolve.domain.errors import CacheError, StorageError
from omniresolve.domain.ports.unit_of_work import RoomUnitOfWork
from omniresolve.domain.reconciliation import AgePolicy, ReconciliationEngine
from omniresolve.domain.rooms import (
    ROOMS_CACHE_TTL_SECONDS,
    drain_background_tasks,
    get_room,
    list_rooms,
    register_room,
)

if TYPE_CHECKING:
    from omniresolve.domain.clock import Clock
    from omniresolve.domain.model import Room
    from omniresolve.domain.ports import KeyValueCache, Omnichannel
    from omniresolve.domain.reconciliation import ReconciliationResult

UnitOfWorkFactory = Callable[[], RoomUnitOfWork]

HealthState = Literal["ok", "fail", "disabled"]

log = getLogger(__name__)


@dataclass(slots=True)
class Services:
    """Adapters wired for one process."""

    omnichannel: Omnichannel
    unit_of_work_factory: UnitOfWorkFactory
    cache: KeyValueCache | None = None
    reconciliation: ReconciliationConfig = field(default_factory=ReconciliationConfig)
    cache_ttl_seconds: int = ROOMS_CACHE_TTL_SECONDS
    database_ping: Callable[[], None] = ping_database
    clock: Clock = utcnow

    def reconciliation_engine(self) -> ReconciliationEngine:
        return ReconciliationEngine(
            unit_of_work_factory=self.unit_of_work_factory,
            omnichannel=self.omnichannel,
            policy=AgePolicy(
                threshold=self.reconciliation.resolve_after,
                stop_at_first_young=self.reconciliation.stop_at_first_young,
            ),
            cache=self.cache,
            clock=self.clock,
            cache_ttl_seconds=self.cache_ttl_seconds,
        )


@dataclass(slots=True, frozen=True)
class HealthReport:
    database: HealthState
    redis: HealthState

    @property
    def healthy(self) -> bool:
        return "fail" not in (self.database, self.redis)


def build_services(
    *,
    omnichannel: Omnichannel | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    cache: KeyValueCache | None = None,
    reconciliation: ReconciliationConfig | None = None,
) -> Services:
    """Wire the configured adapters, reading the environment for anything not supplied."""

    if unit_of_work_factory is None:
        if not is_started():
            startup()
        unit_of_work_factory = SqlAlchemyRoomUnitOfWork

    cache_config = get_cache_config()
    if cache is None:
        cache = build_cache(cache_config)

    services = Services(
        omnichannel=omnichannel or QiscusOmnichannel(get_omnichannel_config()),
        unit_of_work_factory=unit_of_work_factory,
        cache=cache,
        reconciliation=reconciliation or get_reconciliation_config(),
        cache_ttl_seconds=cache_config.rooms_ttl_seconds,
    )
    log.info(
        "Services ready: cache=%s, resolve_after=%s, interval=%ss",
        "redis" if services.cache is not None else "disabled",
        services.reconciliation.resolve_after,
        services.reconciliation.interval_seconds,
    )
    return services


async def close_services(services: Services) -> None:
    await drain_background_tasks()
    aclose = getattr(services.omnichannel, "aclose", None)
    if aclose is not None:
        await aclose()
    cache_close = getattr(services.cache, "aclose", None)
    if cache_close is not None:
        await cache_close()


async def run_reconciliation_tick(services: Services) -> ReconciliationResult:
    return await services.reconciliation_engine().run_tick()


async def create_room_from_webhook(services: Services, raw_body: str | bytes) -> Room:
    """Track the room announced by a new-session webhook body."""

    room_id = parse_new_session_webhook(raw_body)
    return await register_room(
        room_id,
        omnichannel=services.omnichannel,
        unit_of_work_factory=services.unit_of_work_factory,
        cache=services.cache,
        clock=services.clock,
    )


def get_room_by_id(services: Services, room_id: int) -> Room:
    return get_room(room_id, unit_of_work_factory=services.unit_of_work_factory)


async def list_tracked_rooms(services: Services) -> list[Room]:
    return await list_rooms(
        services.unit_of_work_factory,
        services.cache,
        ttl_seconds=services.cache_ttl_seconds,
    )


async def check_health(services: Services) -> HealthReport:
    database: HealthState = "ok"
    try:
        services.database_ping()
    except (StorageError, StartupError) as exc:
        log.error("Database health check failed: %s", exc)
        database = "fail"

    redis: HealthState = "disabled"
    if services.cache is not None:
        redis = "ok"
        try:
            if not await services.cache.ping():
                redis = "fail"
        except CacheError as exc:
            log.error("Redis health check failed: %s", exc)
            redis = "fail"

    return HealthReport(database=database, redis=redis)
