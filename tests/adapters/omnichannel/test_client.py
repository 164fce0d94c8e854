from __future__ import annotations

import json

import httpx
import pytest

from omniresolve.adapters.http_resilience import ResilientClient, UpstreamError
from omniresolve.adapters.omnichannel import QiscusOmnichannel
from omniresolve.config import OmnichannelConfig, ResilienceConfig, RetryPolicy

pytestmark = pytest.mark.anyio

BASE_URL = "https://omni.example.com"


def _omnichannel(
    handler: httpx.MockTransport,
    *,
    base_url_on_client: bool = True,
) -> QiscusOmnichannel:
    resilience = ResilienceConfig(
        name="omnichannel",
        base_url=BASE_URL if base_url_on_client else None,
        retry=RetryPolicy(backoff_factor=0.0),
    )
    config = OmnichannelConfig(
        base_url=BASE_URL,
        app_id="app-123",
        secret_key="secret-456",
        resilience=resilience,
    )
    return QiscusOmnichannel(config, client=ResilientClient(resilience, transport=handler))


async def test_tag_room_posts_tag_request() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": {}})

    async with _omnichannel(httpx.MockTransport(handler)) as omnichannel:
        await omnichannel.tag_room("room-1", "room-1")

    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == f"{BASE_URL}/api/v1/room_tag/create"
    assert json.loads(request.content) == {"room_id": "room-1", "tag": "room-1"}
    assert request.headers["Qiscus-App-Id"] == "app-123"
    assert request.headers["Qiscus-Secret-Key"] == "secret-456"
    assert request.headers["Content-Type"] == "application/json"


async def test_resolve_room_posts_mark_as_resolved() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text="not even json")

    async with _omnichannel(httpx.MockTransport(handler), base_url_on_client=False) as omnichannel:
        await omnichannel.resolve_room("room-9")

    request = seen[0]
    assert str(request.url) == f"{BASE_URL}/api/v1/admin/service/mark_as_resolved"
    assert json.loads(request.content) == {"room_id": "room-9"}


async def test_upstream_errors_propagate_unchanged() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, text='{"errors":"room not found"}')

    async with _omnichannel(httpx.MockTransport(handler)) as omnichannel:
        with pytest.raises(UpstreamError) as exc:
            await omnichannel.resolve_room("room-404")

    assert exc.value.status_code == 400
    assert exc.value.body == '{"errors":"room not found"}'
