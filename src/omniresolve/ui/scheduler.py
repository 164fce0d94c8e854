"""Fixed-interval runner for the reconciliation sweep."""

from __future__ import annotations

import asyncio
import contextlib
import time
import uuid
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

log = getLogger(__name__)


async def run_scheduler(
    tick: Callable[[], Awaitable[object]],
    interval_seconds: float,
    stop_event: asyncio.Event,
    *,
    max_ticks: int | None = None,
) -> int:
    """Run ``tick`` now and then once per ``interval_seconds`` until ``stop_event`` is set.

    Ticks never overlap: a tick that overruns the interval delays the next one.
    An exception raised by a tick is logged and the schedule continues. Returns
    the number of ticks started.
    """

    if interval_seconds <= 0:
        raise ValueError("interval_seconds must be positive")

    log.info("Scheduler started: interval=%ss", interval_seconds)
    ticks = 0
    while not stop_event.is_set():
        if max_ticks is not None and ticks >= max_ticks:
            break
        ticks += 1
        tick_id = str(uuid.uuid4())
        started = time.monotonic()
        log.info("Tick %s started", tick_id)
        try:
            await tick()
        except Exception:
            log.exception("Tick %s failed", tick_id)
        else:
            log.info("Tick %s finished in %.2fs", tick_id, time.monotonic() - started)

        remaining = interval_seconds - (time.monotonic() - started)
        if remaining <= 0:
            continue
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(stop_event.wait(), timeout=remaining)

    log.info("Scheduler stopped after %s tick(s)", ticks)
    return ticks
