"""
Base tracking-table queries shared by all supported database types
"""

from typing import Optional
import logging

from sqlalchemy.engine.default import DefaultDialect
from sqlalchemy.exc import DBAPIError

logger = logging.getLogger(__name__)

NAME_COLUMN = 'name'


class BaseQueries:
    """SQL for the migration tracking table in portable SQL"""

    dialect_name = 'default'
    supports_create_database = False

    def __init__(self, dialect: Optional[DefaultDialect] = None):
        """
        Initialize query builder

        Args:
            dialect: SQLAlchemy dialect whose identifier quoting is used
        """
        self.dialect = dialect or DefaultDialect()
        self.preparer = self.dialect.identifier_preparer

    def quote(self, identifier: str) -> str:
        """Quote a table, column or database name for this dialect."""
        return self.preparer.quote_identifier(identifier)

    def create_database(self, database: str) -> Optional[str]:
        """
        Statement creating a database if it is missing

        Returns:
            SQL string, or None when the database type has no such statement
        """
        return None

    def create_table(self, table_name: str, name_length: int) -> str:
        """
        Statement ensuring the tracking table exists

        Args:
            table_name: Tracking table name
            name_length: Maximum migration name length

        Returns:
            CREATE TABLE IF NOT EXISTS statement
        """
        column = self.quote(NAME_COLUMN)
        return (
            f"CREATE TABLE IF NOT EXISTS {self.quote(table_name)} "
            f"({column} VARCHAR({int(name_length)}) NOT NULL, PRIMARY KEY ({column}))"
        )

    def select_names(self, table_name: str) -> str:
        return f"SELECT {self.quote(NAME_COLUMN)} FROM {self.quote(table_name)}"

    def insert_name(self, table_name: str) -> str:
        column = self.quote(NAME_COLUMN)
        return f"INSERT INTO {self.quote(table_name)} ({column}) VALUES (:name)"

    def delete_name(self, table_name: str) -> str:
        return f"DELETE FROM {self.quote(table_name)} WHERE {self.quote(NAME_COLUMN)} = :name"

    def clear_table(self, table_name: str) -> str:
        """Statement removing every row of the tracking table."""
        return f"DELETE FROM {self.quote(table_name)}"

    def is_duplicate_key(self, error: Exception) -> bool:
        """
        Check whether a driver error is a primary-key conflict

        Only the driver message is inspected, never the bound parameters
        SQLAlchemy adds when rendering the wrapped error.

        Args:
            error: Exception raised by the driver (usually wrapped by SQLAlchemy)

        Returns:
            True if the error reports a duplicate key
        """
        orig = error.orig if isinstance(error, DBAPIError) else error
        message = str(orig).lower()
        return 'unique constraint failed' in message or 'duplicate' in message
