"""Port for the external omnichannel platform."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Omnichannel(Protocol):
    """Room operations on the chat platform.

    Implementations raise ``ClientError`` subclasses on failure and consume no
    response body on success.
    """

    async def tag_room(self, room_id: str, tag: str) -> None: ...

    async def resolve_room(self, room_id: str) -> None: ...
