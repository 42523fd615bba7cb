from __future__ import annotations

import logging
import os
from time import monotonic

from alembic import command
from alembic.config import Config as AlembicConfig
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, inspect, text

from scoreline.config import Settings

logger = logging.getLogger(__name__)


def alembic_env_path() -> str:
    """Return path to the Alembic environment shipped with the package."""
    return os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "alembic"))


def sync_url(async_url: str) -> str:
    """Map an async driver URL onto its synchronous counterpart for migrations."""
    return (
        async_url.replace("+aiosqlite", "", 1)
        .replace("+asyncpg", "+psycopg2", 1)
    )


def initialize(settings: Settings) -> None:
    """
    Ensure the database exists and Alembic migrations are applied.

    Args:
        settings: Application settings.
    """
    if not settings.database.url:
        db_path = settings.database_path()
        if not os.path.exists(db_path):
            logger.info({"scoreline_db": {"message": "creating sqlite db", "path": db_path, "test_mode": settings.test_mode}})
            open(db_path, "a", encoding="utf-8").close()

    upgrade_database(db_url=sync_url(settings.database_url()))


def upgrade_database(*, db_url: str) -> None:
    """
    Run Alembic upgrade head against the given synchronous database URL.
    """
    alembic_config = AlembicConfig()
    alembic_config.set_main_option("script_location", alembic_env_path())
    alembic_config.set_main_option("sqlalchemy.url", db_url)

    script_directory = ScriptDirectory.from_config(alembic_config)
    head_revision = script_directory.get_current_head()
    current_revision = _get_database_revision(db_url)

    if head_revision is not None and current_revision == head_revision:
        logger.info({"scoreline_db": {"event": "alembic_upgrade_skip", "revision": current_revision}})
        return

    started = monotonic()
    logger.info({"scoreline_db": {"event": "alembic_upgrade_start", "from_revision": current_revision}})
    try:
        command.upgrade(alembic_config, "head")
    except Exception as exc:
        logger.error({"scoreline_db": {"event": "alembic_upgrade_error", "error": str(exc)}})
        raise
    else:
        elapsed = monotonic() - started
        logger.info(
            {
                "scoreline_db": {
                    "event": "alembic_upgrade_complete",
                    "elapsed_seconds": round(elapsed, 3),
                }
            }
        )


def _get_database_revision(db_url: str) -> str | None:
    engine = create_engine(db_url, future=True)
    try:
        with engine.connect() as connection:
            inspector = inspect(connection)
            if "alembic_version" not in inspector.get_table_names():
                return None
            result = connection.execute(text("select version_num from alembic_version limit 1"))
            return result.scalar()
    finally:
        engine.dispose()
