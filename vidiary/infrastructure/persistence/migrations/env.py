"""Alembic environment for the vidiary database.

Migrations only run from ``SQLiteVideoStore.open``, which passes its open
connection in ``config.attributes["connection"]``.
"""

from alembic import context

from vidiary.infrastructure.persistence.tables import metadata

config = context.config
target_metadata = metadata


def run_migrations_online() -> None:
    connection = config.attributes.get("connection")
    if connection is None:
        raise RuntimeError("vidiary migrations run through SQLiteVideoStore.open()")

    # SQLite cannot ALTER most things in place; batch mode rebuilds tables
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


run_migrations_online()
