"""Domain error taxonomy.

Outbound HTTP failures are typed by ``omniresolve.adapters.http_resilience``
and share ``ExternalServiceError`` as their base so the domain can handle them.
"""

from __future__ import annotations


class OmniresolveError(Exception):
    """Base class for domain-level failures."""


class RoomNotFoundError(OmniresolveError):
    def __init__(self, room_id: int) -> None:
        super().__init__(f"Room {room_id} not found")
        self.room_id = room_id


class WebhookValidationError(OmniresolveError):
    """Raised when an inbound webhook payload does not have the expected shape."""


class StorageError(OmniresolveError):
    """Raised when the relational store fails for a reason other than not-found."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"Room store operation failed: {operation}")
        self.operation = operation


class CacheError(OmniresolveError):
    """Raised by cache adapters; callers treat it as a miss."""


class ReconciliationError(OmniresolveError):
    """Raised when a sweep cannot start because the room set is unavailable."""


class ExternalServiceError(OmniresolveError):
    """Raised by outbound clients when a call to a remote service fails."""
