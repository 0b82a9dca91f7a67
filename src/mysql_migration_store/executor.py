"""
Query executors used by the migration store.

The store only needs two capabilities from a database client: run a
statement and run a SELECT. QueryExecutor captures them so the SQLAlchemy
implementation can be replaced in tests.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import logging
import time

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection

from .logging_config import log_query

logger = logging.getLogger(__name__)


class QueryExecutor(ABC):
    """Parameterized execute/select capability over one connection."""

    @abstractmethod
    async def execute(self, query: str, params: Optional[Dict[str, Any]] = None) -> int:
        """
        Execute a DDL or DML statement

        Args:
            query: SQL statement with ``:name`` placeholders
            params: Optional bound parameters

        Returns:
            Number of affected rows (-1 when the driver does not report it)
        """

    @abstractmethod
    async def select(self, query: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Execute a SELECT statement

        Args:
            query: SQL query with ``:name`` placeholders
            params: Optional bound parameters

        Returns:
            List of result dictionaries
        """

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying connection."""


class SQLAlchemyExecutor(QueryExecutor):
    """
    Executor over a single SQLAlchemy AsyncConnection.

    Each statement runs in its own transaction: committed on success, rolled
    back on failure, so an error never leaves the connection unusable.
    """

    def __init__(self, connection: AsyncConnection):
        """
        Initialize executor with an open connection

        Args:
            connection: SQLAlchemy AsyncConnection owned by this executor
        """
        self.connection = connection

    async def execute(self, query: str, params: Optional[Dict[str, Any]] = None) -> int:
        start_time = time.perf_counter()
        try:
            result = await self.connection.execute(text(query), params or {})
            await self.connection.commit()
        except SQLAlchemyError:
            await self._rollback()
            raise

        log_query(logger, query, params, time.perf_counter() - start_time)
        return result.rowcount if result.rowcount is not None else -1

    async def select(self, query: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        start_time = time.perf_counter()
        try:
            result = await self.connection.execute(text(query), params or {})
            rows = [dict(row._mapping) for row in result]
            await self.connection.commit()
        except SQLAlchemyError:
            await self._rollback()
            raise

        log_query(logger, query, params, time.perf_counter() - start_time)
        return rows

    async def close(self) -> None:
        await self.connection.close()

    async def _rollback(self) -> None:
        try:
            await self.connection.rollback()
        except SQLAlchemyError as e:
            logger.warning(f"Rollback after failed statement did not complete: {e}")
