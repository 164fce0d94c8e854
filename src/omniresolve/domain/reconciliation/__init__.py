"""Sweeping aged rooms: resolve them upstream, then drop the local record."""

from __future__ import annotations

from .engine import ReconciliationEngine, ReconciliationResult
from .policy import DEFAULT_RESOLVE_AFTER, AgePolicy

__all__ = [
    "DEFAULT_RESOLVE_AFTER",
    "AgePolicy",
    "ReconciliationEngine",
    "ReconciliationResult",
]
