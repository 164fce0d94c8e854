from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from omniresolve.adapters.sqlalchemy import start_mappers
from omniresolve.adapters.sqlalchemy.migrations import upgrade_head
from omniresolve.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyRoomUnitOfWork,
    shutdown,
    startup,
)
from tests.helpers.rooms import FakeOmnichannel, FakeUnitOfWorkFactory, InMemoryCache

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    # One shared connection so worker threads (TestClient) see the same in-memory database.
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyRoomUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyRoomUnitOfWork:
        return SqlAlchemyRoomUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def fake_uow() -> FakeUnitOfWorkFactory:
    return FakeUnitOfWorkFactory()


@pytest.fixture
def fake_omnichannel() -> FakeOmnichannel:
    return FakeOmnichannel()


@pytest.fixture
def memory_cache() -> InMemoryCache:
    return InMemoryCache()
