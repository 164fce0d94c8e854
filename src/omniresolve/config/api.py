"""HTTP surface configuration."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_int, optional_env_var, require_env_var

DEFAULT_PORT = 8080


@dataclass(frozen=True, slots=True)
class ApiConfig:
    secret_key: str
    host: str = "0.0.0.0"  # noqa: S104
    port: int = DEFAULT_PORT


def get_api_config() -> ApiConfig:
    return ApiConfig(
        secret_key=require_env_var("APP_SECRET_KEY"),
        host=optional_env_var("HOST") or "0.0.0.0",  # noqa: S104
        port=env_int("PORT", DEFAULT_PORT),
    )
