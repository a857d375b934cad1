"""
Schema upgrades at startup.

A database first built by Base.metadata.create_all() has the tables but
no alembic_version row; it is stamped at BASE_REVISION before upgrading
so the initial migration isn't replayed over existing tables.
"""

import logging
import os

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

# Revision whose schema equals what create_all() builds
BASE_REVISION = "5b2f0c9d1a47"

ALEMBIC_INI = os.path.join(os.path.dirname(__file__), "..", "alembic.ini")


def upgrade_database(engine: Engine, ini_path: str = ALEMBIC_INI) -> bool:
    """
    Bring the schema to head. Returns False when migrations were skipped
    or failed; the app still starts either way.
    """
    if not os.path.exists(ini_path):
        logger.info("alembic.ini not found, skipping migrations")
        return False

    try:
        cfg = Config(ini_path)
        tables = set(inspect(engine).get_table_names())
        if "alembic_version" not in tables and "quotations" in tables:
            logger.info("Stamping %s over tables created without Alembic", BASE_REVISION)
            command.stamp(cfg, BASE_REVISION)

        command.upgrade(cfg, "head")
    except Exception as e:
        logger.warning("Alembic migration warning: %s", e)
        return False

    logger.info("Schema at head")
    return True
