"""Schema versioning with Alembic.

The store runs these functions on its own connection (through
``AsyncConnection.run_sync``) while opening, so schema creation and upgrades
share the engine and lifecycle of every other operation.
"""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config as AlembicConfig
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy.engine import Connection

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"


def get_alembic_config() -> AlembicConfig:
    """Build an Alembic config pointing at the packaged migration scripts."""
    config = AlembicConfig()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    return config


def head_revision() -> str | None:
    return ScriptDirectory.from_config(get_alembic_config()).get_current_head()


def current_revision(connection: Connection) -> str | None:
    return MigrationContext.configure(connection).get_current_revision()


def upgrade_to_head(connection: Connection) -> None:
    """Apply pending migrations on an open connection."""
    config = get_alembic_config()
    config.attributes["connection"] = connection
    before = current_revision(connection)
    command.upgrade(config, "head")
    after = current_revision(connection)
    if before != after:
        logger.info("Database schema upgraded: %s -> %s", before or "empty", after)
