"""
Tracking-table queries
"""

from .base_queries import BaseQueries, NAME_COLUMN
from .specific import MySQLSpecificQueries, SQLiteSpecificQueries

# Backend name (as reported by SQLAlchemy URLs) -> query builder
QUERIES_BY_BACKEND = {
    'mysql': MySQLSpecificQueries,
    'mariadb': MySQLSpecificQueries,
    'sqlite': SQLiteSpecificQueries,
}


def get_queries(backend_name: str) -> BaseQueries:
    """
    Get the query builder for a database backend

    Args:
        backend_name: Backend name such as 'mysql' or 'sqlite'

    Returns:
        Query builder instance

    Raises:
        ValueError: If the backend is not supported
    """
    try:
        return QUERIES_BY_BACKEND[backend_name]()
    except KeyError:
        raise ValueError(f"Unsupported database type: {backend_name}") from None


__all__ = [
    'BaseQueries',
    'NAME_COLUMN',
    'MySQLSpecificQueries',
    'SQLiteSpecificQueries',
    'QUERIES_BY_BACKEND',
    'get_queries'
]
