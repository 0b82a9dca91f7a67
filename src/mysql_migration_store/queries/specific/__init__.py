"""
Database-specific queries
"""

from .mysql_queries import MySQLSpecificQueries
from .sqlite_queries import SQLiteSpecificQueries

__all__ = [
    'MySQLSpecificQueries',
    'SQLiteSpecificQueries'
]
