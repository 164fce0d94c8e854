from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from omniresolve.app import Services
from omniresolve.domain.reconciliation import ReconciliationResult
from omniresolve.ui import cli

if TYPE_CHECKING:
    from tests.helpers.rooms import FakeOmnichannel, FakeUnitOfWorkFactory


@pytest.fixture(autouse=True)
def quiet_setup(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)
    monkeypatch.setattr(cli, "configure_logging", lambda **_: None)


def test_serve_passes_bind_options(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_serve(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr(cli, "serve", fake_serve)

    cli.main(["serve", "--host", "127.0.0.1", "--port", "9000"])

    assert captured == {"host": "127.0.0.1", "port": 9000}


def test_serve_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_serve(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr(cli, "serve", fake_serve)

    cli.main(["serve"])

    assert captured == {"host": None, "port": None}


def test_cron_interval(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    async def fake_cron(**kwargs: object) -> int:
        captured.update(kwargs)
        return 0

    monkeypatch.setattr(cli, "run_cron", fake_cron)

    cli.main(["cron", "--interval", "2.5"])

    assert captured == {"interval": 2.5}


def test_reconcile_runs_one_tick(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    async def fake_reconcile() -> ReconciliationResult:
        calls.append("tick")
        return ReconciliationResult(examined=1, resolved=1, deleted=1)

    monkeypatch.setattr(cli, "reconcile_once", fake_reconcile)

    cli.main(["--log-level", "debug", "reconcile"])

    assert calls == ["tick"]


def test_invalid_log_level_exits_with_usage_error() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--log-level", "chatty", "reconcile"])

    assert excinfo.value.code == 2


def test_missing_command_exits_with_usage_error() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main([])

    assert excinfo.value.code == 2


def test_command_failure_exits_with_error(monkeypatch: pytest.MonkeyPatch) -> None:
    async def failing_reconcile() -> ReconciliationResult:
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(cli, "reconcile_once", failing_reconcile)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["reconcile"])

    assert excinfo.value.code == 1


def test_keyboard_interrupt_is_a_clean_exit(monkeypatch: pytest.MonkeyPatch) -> None:
    def interrupted(**_: object) -> None:
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "serve", interrupted)

    cli.main(["serve"])


@pytest.mark.anyio
async def test_run_cron_closes_services(
    monkeypatch: pytest.MonkeyPatch, services_for_cli: Services
) -> None:
    closed: list[Services] = []

    async def fake_close(services: Services) -> None:
        closed.append(services)

    monkeypatch.setattr(cli, "build_services", lambda: services_for_cli)
    monkeypatch.setattr(cli, "close_services", fake_close)
    monkeypatch.setattr(cli, "run_scheduler", _one_tick_scheduler)

    ticks = await cli.run_cron(interval=1)

    assert ticks == 1
    assert closed == [services_for_cli]


async def _one_tick_scheduler(tick: object, interval: float, stop_event: object) -> int:
    _ = (tick, interval, stop_event)
    return 1


@pytest.fixture
def services_for_cli(
    fake_uow: FakeUnitOfWorkFactory, fake_omnichannel: FakeOmnichannel
) -> Services:
    return Services(omnichannel=fake_omnichannel, unit_of_work_factory=fake_uow)
