"""Locally tracked omnichannel room."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(eq=False, kw_only=True)
class Room:
    """An open chat session awaiting resolution.

    A room is created when the platform announces a new session and removed
    once it has been resolved upstream. ``id`` is assigned by the store.
    """

    multichannel_room_id: str
    id: int | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime | None = None

    def age(self, now: datetime) -> timedelta:
        created_at = self.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=UTC)
        return now - created_at
