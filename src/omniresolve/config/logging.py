"""Shared logging setup for omniresolve entry points."""

from __future__ import annotations

import logging

from .env import optional_env_var
from .errors import InvalidConfigurationValueError

_NOISY_LOGGERS = ("httpx", "httpcore", "alembic.runtime.migration")


def resolve_log_level(default: int = logging.INFO) -> int:
    """Return the level named by ``LOG_LEVEL`` (e.g. ``DEBUG``), or ``default``."""

    raw = optional_env_var("LOG_LEVEL")
    if raw is None:
        return default
    level = logging.getLevelNamesMapping().get(raw.upper())
    if level is None:
        raise InvalidConfigurationValueError("LOG_LEVEL", raw, "a logging level name")
    return level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Parameters mirror ``logging.basicConfig`` with a simplified contract: the
    level defaults to ``LOG_LEVEL`` (or INFO) and the format stays terse enough
    for container logs. Pass ``force=True`` to reconfigure during tests.
    """

    effective_level = resolve_log_level() if level is None else level
    logging.basicConfig(
        level=effective_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        force=force,
    )
    if effective_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
