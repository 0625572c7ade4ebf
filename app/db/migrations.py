"""Run Alembic migrations from application code at startup."""

from __future__ import annotations

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _alembic_config() -> Config:
    """Build an Alembic config pointing at the project's scripts and database."""

    alembic_cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.database_url)
    return alembic_cfg


def _is_at_head(cfg: Config) -> bool:
    from app.db.session import engine

    heads = set(ScriptDirectory.from_config(cfg).get_heads())
    with engine.connect() as connection:
        current = MigrationContext.configure(connection).get_current_heads()
    logger.info("Database revision(s): %s; script head(s): %s", current or "none", heads)
    return bool(current) and set(current) == heads


def run_migrations() -> None:
    """Upgrade the schema to the latest revision, skipping when already there."""

    cfg = _alembic_config()

    try:
        if _is_at_head(cfg):
            logger.info("Database schema is up to date")
            return
    except SQLAlchemyError as exc:
        logger.warning("Could not read the current revision (%s); upgrading anyway", exc)

    logger.info("Applying database migrations")
    try:
        command.upgrade(cfg, "heads")
    except Exception:
        logger.exception("Alembic upgrade failed")
        raise
    logger.info("Database migrations applied")


__all__ = ["run_migrations"]
