"""
MySQL-specific tracking-table queries
"""

from typing import Optional
import logging

from sqlalchemy.dialects import mysql
from sqlalchemy.exc import DBAPIError

from ..base_queries import BaseQueries

logger = logging.getLogger(__name__)

# ER_DUP_ENTRY
MYSQL_DUPLICATE_ENTRY = 1062


class MySQLSpecificQueries(BaseQueries):
    """Tracking-table SQL for MySQL and MariaDB"""

    dialect_name = 'mysql'
    supports_create_database = True

    def __init__(self):
        super().__init__(mysql.dialect())

    def create_database(self, database: str) -> Optional[str]:
        return f"CREATE DATABASE IF NOT EXISTS {self.quote(database)}"

    def clear_table(self, table_name: str) -> str:
        """TRUNCATE is non-transactional and faster than DELETE on MySQL."""
        return f"TRUNCATE TABLE {self.quote(table_name)}"

    def is_duplicate_key(self, error: Exception) -> bool:
        orig = error.orig if isinstance(error, DBAPIError) else error
        args = getattr(orig, 'args', ())
        if args and args[0] == MYSQL_DUPLICATE_ENTRY:
            return True
        return super().is_duplicate_key(error)
