"""
SQLite-specific tracking-table queries
"""

import logging

from sqlalchemy.dialects import sqlite

from ..base_queries import BaseQueries

logger = logging.getLogger(__name__)


class SQLiteSpecificQueries(BaseQueries):
    """
    Tracking-table SQL for SQLite

    SQLite creates the database file on connect and has no TRUNCATE, so
    the base DELETE FROM is used to clear the table.
    """

    dialect_name = 'sqlite'
    supports_create_database = False

    def __init__(self):
        super().__init__(sqlite.dialect())
