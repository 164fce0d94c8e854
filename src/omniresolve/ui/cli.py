from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys
from typing import TYPE_CHECKING

import uvicorn
from dotenv import load_dotenv

from omniresolve.app import build_services, close_services, run_reconciliation_tick
from omniresolve.config import configure_logging, get_api_config
from omniresolve.ui.api import create_api
from omniresolve.ui.scheduler import run_scheduler

if TYPE_CHECKING:
    from collections.abc import Sequence

    from omniresolve.domain.reconciliation import ReconciliationResult

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Track omnichannel rooms and resolve stale ones")
    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level name (defaults to LOG_LEVEL or INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", type=str, help="Bind address (defaults to HOST)")
    serve_parser.add_argument("--port", type=int, help="Bind port (defaults to PORT or 8080)")

    cron = subparsers.add_parser("cron", help="Run the periodic reconciliation sweep")
    cron.add_argument(
        "--interval",
        type=float,
        help="Seconds between sweeps (defaults to RECONCILE_INTERVAL_SECONDS)",
    )

    subparsers.add_parser("reconcile", help="Run one reconciliation sweep and exit")

    return parser.parse_args(list(argv))


def _parse_log_level(value: str | None) -> int | None:
    if value is None:
        return None
    level = logging.getLevelNamesMapping().get(value.upper())
    if level is None:
        raise ValueError(f"Unknown log level: {value}")
    return level


def serve(*, host: str | None = None, port: int | None = None) -> None:
    config = get_api_config()
    services = build_services()
    app = create_api(services, config)
    uvicorn.run(app, host=host or config.host, port=port or config.port, log_config=None)


async def run_cron(*, interval: float | None = None) -> int:
    services = build_services()
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop_event.set)

    async def tick() -> None:
        await run_reconciliation_tick(services)

    try:
        return await run_scheduler(
            tick,
            interval or services.reconciliation.interval_seconds,
            stop_event,
        )
    finally:
        await close_services(services)


async def reconcile_once() -> ReconciliationResult:
    services = build_services()
    try:
        return await run_reconciliation_tick(services)
    finally:
        await close_services(services)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        level = _parse_log_level(parsed_args.log_level)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=level)

    try:
        if parsed_args.command == "serve":
            serve(host=parsed_args.host, port=parsed_args.port)
        elif parsed_args.command == "cron":
            asyncio.run(run_cron(interval=parsed_args.interval))
        elif parsed_args.command == "reconcile":
            result = asyncio.run(reconcile_once())
            log.info("Reconciliation finished: %s", result.summary())
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except KeyboardInterrupt:
        log.info("Closed by user (Ctrl+C)")
    except Exception:
        log.exception("Fatal error in %s", parsed_args.command)
        sys.exit(1)


if __name__ == "__main__":
    main()
