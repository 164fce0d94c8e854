"""HTTP client for the Qiscus omnichannel admin API."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Final

from omniresolve.adapters.http_resilience import ResilientClient

from .schema import ResolveRoomRequest, RoomTagRequest

if TYPE_CHECKING:
    from types import TracebackType

    from omniresolve.config.omnichannel import OmnichannelConfig

log = getLogger(__name__)

ROOM_TAG_PATH: Final[str] = "/api/v1/room_tag/create"
MARK_AS_RESOLVED_PATH: Final[str] = "/api/v1/admin/service/mark_as_resolved"


class QiscusOmnichannel:
    """Room operations against one Qiscus app.

    Every call is a JSON POST authenticated by the app id and secret key
    headers. Response bodies are not read; failures surface as the
    ``ClientError`` subclasses raised by ``ResilientClient.call``.
    """

    def __init__(self, config: OmnichannelConfig, *, client: ResilientClient | None = None) -> None:
        self.config = config
        self._client = client or ResilientClient(config.resilience)
        self._headers = {
            "Qiscus-App-Id": config.app_id,
            "Qiscus-Secret-Key": config.secret_key,
        }

    async def __aenter__(self) -> QiscusOmnichannel:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def tag_room(self, room_id: str, tag: str) -> None:
        payload = RoomTagRequest(room_id=room_id, tag=tag)
        await self._post(ROOM_TAG_PATH, payload.model_dump())
        log.debug("Tagged room %s with %r", room_id, tag)

    async def resolve_room(self, room_id: str) -> None:
        payload = ResolveRoomRequest(room_id=room_id)
        await self._post(MARK_AS_RESOLVED_PATH, payload.model_dump())

    async def _post(self, path: str, body: dict[str, object]) -> None:
        await self._client.call("POST", self._url(path), json=body, headers=self._headers)

    def _url(self, path: str) -> str:
        if self.config.resilience.base_url:
            return path
        return f"{self.config.base_url}{path}"
