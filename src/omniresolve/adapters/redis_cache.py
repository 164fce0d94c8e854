"""Redis-backed implementation of the key-value cache port."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from redis.asyncio import Redis
from redis.exceptions import RedisError

from omniresolve.domain.errors import CacheError

if TYPE_CHECKING:
    from omniresolve.config.cache import CacheConfig

log = getLogger(__name__)

SOCKET_TIMEOUT_SECONDS = 5.0


class RedisCache:
    """String cache over ``redis.asyncio``; every Redis failure becomes ``CacheError``."""

    def __init__(self, client: Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> RedisCache:
        client = Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=SOCKET_TIMEOUT_SECONDS,
            socket_connect_timeout=SOCKET_TIMEOUT_SECONDS,
        )
        log.info("Redis cache client created")
        return cls(client)

    async def get(self, key: str) -> str | None:
        try:
            value = await self._client.get(key)
        except RedisError as exc:
            raise CacheError(f"Unable to get cache key {key}") from exc
        if isinstance(value, bytes):
            return value.decode()
        return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._client.set(key, value, ex=ttl_seconds)
        except RedisError as exc:
            raise CacheError(f"Unable to set cache key {key}") from exc

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(key)
        except RedisError as exc:
            raise CacheError(f"Unable to delete cache key {key}") from exc

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as exc:
            raise CacheError("Redis ping failed") from exc

    async def aclose(self) -> None:
        await self._client.aclose()


def build_cache(config: CacheConfig) -> RedisCache | None:
    if not config.enabled or config.redis_url is None:
        return None
    return RedisCache.from_url(config.redis_url)


if TYPE_CHECKING:
    from omniresolve.domain.ports import KeyValueCache

    def _check(client: Redis) -> KeyValueCache:
        return RedisCache(client)
