"""Reconciliation sweep defaults."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import timedelta

from .env import env_bool, env_float
from .errors import ConfigurationError

DEFAULT_RESOLVE_AFTER_MINUTES = 10.0
DEFAULT_INTERVAL_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class ReconciliationConfig:
    resolve_after: timedelta = timedelta(minutes=DEFAULT_RESOLVE_AFTER_MINUTES)
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS
    stop_at_first_young: bool = True


def get_reconciliation_config() -> ReconciliationConfig:
    minutes = env_float("RESOLVE_AFTER_MINUTES", DEFAULT_RESOLVE_AFTER_MINUTES)
    interval = env_float("RECONCILE_INTERVAL_SECONDS", DEFAULT_INTERVAL_SECONDS)
    if not math.isfinite(minutes) or minutes < 0:
        raise ConfigurationError("RESOLVE_AFTER_MINUTES must be a finite non-negative number")
    if not math.isfinite(interval) or interval <= 0:
        raise ConfigurationError("RECONCILE_INTERVAL_SECONDS must be positive")
    try:
        resolve_after = timedelta(minutes=minutes)
    except OverflowError as exc:
        raise ConfigurationError("RESOLVE_AFTER_MINUTES is out of range") from exc
    return ReconciliationConfig(
        resolve_after=resolve_after,
        interval_seconds=interval,
        stop_at_first_young=env_bool("RECONCILE_STOP_AT_FIRST_YOUNG", default=True),
    )
