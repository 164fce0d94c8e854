"""Age policy deciding which rooms a sweep resolves.

Rooms are examined in creation order. A room is due once its age reaches the
threshold. With ``stop_at_first_young`` the first room that is not yet due ends
the sweep, which is exact as long as the store returns rooms oldest first;
without it young rooms are skipped and the scan carries on.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from datetime import datetime

    from omniresolve.domain.model import Room

DEFAULT_RESOLVE_AFTER: Final[timedelta] = timedelta(minutes=10)


@dataclass(frozen=True, slots=True)
class AgePolicy:
    threshold: timedelta = DEFAULT_RESOLVE_AFTER
    stop_at_first_young: bool = True

    def __post_init__(self) -> None:
        if self.threshold < timedelta(0):
            raise ValueError("threshold must not be negative")

    def is_due(self, room: Room, now: datetime) -> bool:
        return room.age(now) >= self.threshold
