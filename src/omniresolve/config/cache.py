"""Room listing cache configuration."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_int, optional_env_var
from .errors import ConfigurationError

DEFAULT_ROOMS_CACHE_TTL_SECONDS = 600


@dataclass(frozen=True, slots=True)
class CacheConfig:
    redis_url: str | None = None
    rooms_ttl_seconds: int = DEFAULT_ROOMS_CACHE_TTL_SECONDS

    @property
    def enabled(self) -> bool:
        return self.redis_url is not None


def get_cache_config() -> CacheConfig:
    ttl = env_int("ROOMS_CACHE_TTL_SECONDS", DEFAULT_ROOMS_CACHE_TTL_SECONDS)
    if ttl <= 0:
        raise ConfigurationError("ROOMS_CACHE_TTL_SECONDS must be positive")
    return CacheConfig(redis_url=optional_env_var("REDIS_URL"), rooms_ttl_seconds=ttl)
