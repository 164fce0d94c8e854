"""Run the room schema migrations shipped with the SQLAlchemy adapter.

The ``[tool.alembic]`` table in ``pyproject.toml`` serves the ``alembic`` CLI
during development. At runtime the scripts are located next to this module so
an installed package migrates without a project checkout.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

from omniresolve.config import get_database_config

MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent
HEAD: Final[str] = "head"

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def _build_config(database_uri: str | None = None) -> Config:
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_PATH))
    if database_uri is not None:
        config.set_main_option("sqlalchemy.url", database_uri)
    return config


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Bring the room schema to the latest revision.

    With ``engine`` the migration runs on one of its connections inside a
    single transaction; otherwise ``database_uri`` (or the configured database)
    is opened by the migration environment.
    """

    if engine is None:
        command.upgrade(_build_config(database_uri or get_database_config().uri), HEAD)
        return

    config = _build_config()
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, HEAD)
