"""Configuration types for resilient HTTP clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping

    from omniresolve.common.sanitizer import Sanitizer

ALL_METHODS = frozenset({"DELETE", "GET", "HEAD", "OPTIONS", "PATCH", "POST", "PUT"})


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Bounded exponential retry.

    A call is retried when the transport fails or the response status is in
    ``status_forcelist``; every other status is final.
    """

    total: int = 3
    backoff_factor: float = 0.5
    max_backoff_wait: float = 30.0
    backoff_jitter: float = 0.0
    respect_retry_after_header: bool = True
    allowed_methods: frozenset[str] = ALL_METHODS
    status_forcelist: frozenset[int] = field(default_factory=lambda: frozenset({429, 500}))
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )

    def delay_for(self, attempt: int) -> float:
        """Wait before retry number ``attempt`` (0-based), ignoring jitter."""

        if attempt < 0:
            raise ValueError("attempt must be non-negative")
        return min(self.backoff_factor * (2**attempt), self.max_backoff_wait)


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 20.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    default_headers: Mapping[str, str] | None = None
    debug: bool = False
    sanitizer: Sanitizer | None = None
