"""Domain port definitions for adapters."""

from __future__ import annotations

from .cache import KeyValueCache
from .omnichannel import Omnichannel
from .persistence import Repository, RoomRepository
from .unit_of_work import RepositoryCollection, RoomRepositories, RoomUnitOfWork, UnitOfWork

__all__ = [
    "KeyValueCache",
    "Omnichannel",
    "Repository",
    "RepositoryCollection",
    "RoomRepositories",
    "RoomRepository",
    "RoomUnitOfWork",
    "UnitOfWork",
]
