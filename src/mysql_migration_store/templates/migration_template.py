"""
Migration: {name}

Created by the migration runner from the mysql-migration-store template.
``connection`` is the live SQLAlchemy AsyncConnection returned by
MigrationStore.connect().
"""

from sqlalchemy import text


async def up(connection):
    """Apply the migration."""
    await connection.execute(text("SELECT 1"))
    await connection.commit()


async def down(connection):
    """Revert the migration."""
    await connection.execute(text("SELECT 1"))
    await connection.commit()
