"""Qiscus omnichannel configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from omniresolve.common.sanitizer import Sanitizer

from .env import env_bool, env_float, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

OMNICHANNEL_TIMEOUT_SECONDS = 20.0


@dataclass(frozen=True)
class OmnichannelConfig:
    """Holds omnichannel API credentials and transport settings."""

    base_url: str
    app_id: str
    secret_key: str
    resilience: ResilienceConfig


def get_omnichannel_config(*, resilience: ResilienceConfig | None = None) -> OmnichannelConfig:
    values = require_env_vars(("QISCUS_APP_ID", "QISCUS_SECRET_KEY", "QISCUS_OMNICHANNEL_URL"))
    base_url = values["QISCUS_OMNICHANNEL_URL"].rstrip("/")

    if resilience is None:
        per_second = env_float("OMNICHANNEL_RATE_LIMIT_PER_SECOND", 0.0)
        resilience = ResilienceConfig(
            name="omnichannel",
            base_url=base_url,
            timeout_seconds=env_float("OMNICHANNEL_TIMEOUT_SECONDS", OMNICHANNEL_TIMEOUT_SECONDS),
            ratelimit=RateLimit(max_calls=int(per_second), per_seconds=1.0)
            if per_second >= 1
            else None,
            debug=env_bool("OMNICHANNEL_DEBUG", default=False),
            sanitizer=Sanitizer(),
        )

    return OmnichannelConfig(
        base_url=base_url,
        app_id=values["QISCUS_APP_ID"],
        secret_key=values["QISCUS_SECRET_KEY"],
        resilience=resilience,
    )
