"""
MySQL migration store.

Keeps the set of executed migration names in a single tracking table and
exposes the storage backend operations a migration-runner host calls.
"""

from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional
import logging

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from .backend import MigrationBackend
from .config import StoreConfig, build_async_engine
from .errors import (
    ConfigurationError,
    DatabaseConnectionError,
    DuplicateMigrationError,
    QueryError,
    SchemaError,
)
from .executor import QueryExecutor, SQLAlchemyExecutor
from .logging_config import StoreLoggerAdapter
from .queries import NAME_COLUMN, BaseQueries, get_queries
from .url import get_backend_name, get_database_name, redact_url, server_url

TEMPLATES_DIR = Path(__file__).parent / 'templates'


class MigrationStore(MigrationBackend):
    """
    Migration-state store backed by a MySQL-family database.

    Lifecycle is unconnected -> connected -> disconnected. Data operations
    require a connected store; the store is meant for one caller issuing one
    operation at a time.

    Example:
        async with MigrationStore({'url': 'mysql://user:pw@localhost/app'}) as store:
            done = await store.get_executed_migration_names()
    """

    def __init__(self, params: Optional[Mapping[str, Any]],
                 executor: Optional[QueryExecutor] = None,
                 engine_builder: Callable[..., AsyncEngine] = build_async_engine):
        """
        Initialize store configuration. No I/O happens here.

        Args:
            params: Connection parameters with a required ``url`` and an
                optional nested ``mysql`` block of overrides
            executor: Pre-opened executor to use instead of opening a
                connection from the URL
            engine_builder: Factory used to build SQLAlchemy async engines

        Raises:
            ConfigurationError: If ``url`` is missing, names an unsupported database
                type, or an override is invalid
        """
        self.config = StoreConfig.from_params(params)
        self.logger = StoreLoggerAdapter(logging.getLogger(__name__), {'url': self.config.url})

        self._provided_executor = executor
        self._engine_builder = engine_builder
        self._engine: Optional[AsyncEngine] = None
        self._executor: Optional[QueryExecutor] = None
        self._queries: Optional[BaseQueries] = None

        self.logger.debug(
            f"Migration store configured for {self.config.safe_url} "
            f"(table={self.config.migration_table}, reset={self.config.reset_execution}, "
            f"create_db={self.config.create_db_on_connect})"
        )

    @property
    def is_connected(self) -> bool:
        return self._executor is not None

    @property
    def queries(self) -> BaseQueries:
        """Query builder for the configured database type."""
        if self._queries is None:
            backend = get_backend_name(self.config.url)
            try:
                self._queries = get_queries(backend)
            except ValueError as e:
                raise ConfigurationError(str(e)) from e
        return self._queries

    async def connect(self) -> Any:
        """
        Connect and make sure the tracking table exists.

        Steps run strictly in order and the first failure aborts the rest:
        optional database creation, the long-lived connection, table bootstrap.

        Returns:
            The live connection handle

        Raises:
            ParseError: If the URL cannot be parsed when creating the database
            DatabaseConnectionError: If a connection cannot be opened
            SchemaError: If the tracking table cannot be created
        """
        if self.is_connected:
            raise DatabaseConnectionError("Migration store is already connected")

        if self.config.create_db_on_connect:
            await self._create_database()

        executor = await self._open_executor()
        try:
            await self._ensure_migration_table(executor)
        except BaseException:
            # also on cancellation
            await self._release(executor)
            raise

        self._executor = executor
        self.logger.info(f"Connected migration store to {self.config.safe_url}")
        return getattr(executor, 'connection', executor)

    async def _create_database(self) -> None:
        """Create the target database through a transient server connection."""
        database = get_database_name(self.config.url)
        sql = self.queries.create_database(database)
        if sql is None:
            self.logger.info(
                f"{self.queries.dialect_name} creates databases on connect, skipping CREATE DATABASE"
            )
            return

        server = server_url(self.config.url)
        self.logger.debug(f"Ensuring database '{database}' exists on {redact_url(server)}")

        engine = self._engine_builder(server)
        try:
            async with engine.connect() as conn:
                await conn.execute(text(sql))
                await conn.commit()
        except (SQLAlchemyError, OSError) as e:
            self.logger.error(f"Failed to create database '{database}': {e}")
            raise DatabaseConnectionError(f"Could not create database '{database}': {e}") from e
        finally:
            await engine.dispose()

        self.logger.info(f"Database '{database}' is present")

    async def _open_executor(self) -> QueryExecutor:
        """Open the connection every later operation runs on."""
        if self._provided_executor is not None:
            return self._provided_executor

        engine = self._engine_builder(self.config.url)
        try:
            connection = await engine.connect()
        except (SQLAlchemyError, OSError) as e:
            await engine.dispose()
            self.logger.error(f"Failed to connect to {self.config.safe_url}: {e}")
            raise DatabaseConnectionError(f"Could not connect to {self.config.safe_url}: {e}") from e
        except BaseException:
            await engine.dispose()
            raise

        self._engine = engine
        return SQLAlchemyExecutor(connection)

    async def _ensure_migration_table(self, executor: QueryExecutor) -> None:
        """Create the tracking table if it does not exist yet."""
        table = self.config.migration_table
        sql = self.queries.create_table(table, self.config.name_field_length)
        try:
            await executor.execute(sql)
        except SQLAlchemyError as e:
            self.logger.error(f"Failed to create migration table '{table}': {e}")
            raise SchemaError(f"Could not create migration table '{table}': {e}") from e

        self.logger.debug(f"Migration table '{table}' initialized")

    async def disconnect(self) -> None:
        """Close the connection. Close errors are logged, never raised."""
        executor, self._executor = self._executor, None
        if executor is None:
            return

        await self._release(executor)
        self.logger.info("Disconnected migration store")

    async def _release(self, executor: QueryExecutor) -> None:
        try:
            await executor.close()
        except Exception as e:
            self.logger.warning(f"Error closing migration store connection: {e}")

        engine, self._engine = self._engine, None
        if engine is not None:
            try:
                await engine.dispose()
            except Exception as e:
                self.logger.warning(f"Error disposing migration store engine: {e}")

    def _require_executor(self) -> QueryExecutor:
        if self._executor is None:
            raise DatabaseConnectionError("Migration store is not connected")
        return self._executor

    async def get_executed_migration_names(self) -> List[str]:
        """
        Names of all executed migrations, in whatever order the database returns.

        Returns:
            List of migration names, empty when nothing is recorded
        """
        executor = self._require_executor()
        sql = self.queries.select_names(self.config.migration_table)
        try:
            rows = await executor.select(sql)
        except SQLAlchemyError as e:
            self.logger.error(f"Failed to read executed migrations: {e}")
            raise QueryError(f"Could not read executed migrations: {e}") from e

        if not isinstance(rows, list) or not rows:
            return []
        return [row[NAME_COLUMN] for row in rows]

    def get_template_path(self) -> Path:
        """Path of the bundled migration template, independent of the cwd."""
        return TEMPLATES_DIR / self.config.migration_file

    async def mark_executed(self, name: str) -> None:
        """
        Record a migration as executed.

        Raises:
            DuplicateMigrationError: If the name is already recorded
            QueryError: If the insert fails for any other reason
        """
        executor = self._require_executor()
        sql = self.queries.insert_name(self.config.migration_table)
        try:
            await executor.execute(sql, {'name': name})
        except IntegrityError as e:
            if self.queries.is_duplicate_key(e):
                self.logger.error(f"Migration '{name}' is already marked as executed")
                raise DuplicateMigrationError(name) from e
            self.logger.error(f"Failed to mark migration '{name}' as executed: {e}")
            raise QueryError(f"Could not mark migration '{name}' as executed: {e}") from e
        except SQLAlchemyError as e:
            self.logger.error(f"Failed to mark migration '{name}' as executed: {e}")
            raise QueryError(f"Could not mark migration '{name}' as executed: {e}") from e

        self.logger.debug(f"Marked migration '{name}' as executed")

    async def unmark_executed(self, name: str) -> None:
        """Forget a migration. Unknown names are not an error."""
        executor = self._require_executor()
        sql = self.queries.delete_name(self.config.migration_table)
        try:
            await executor.execute(sql, {'name': name})
        except SQLAlchemyError as e:
            self.logger.error(f"Failed to unmark migration '{name}': {e}")
            raise QueryError(f"Could not unmark migration '{name}': {e}") from e

        self.logger.debug(f"Unmarked migration '{name}'")

    async def reset_executed(self) -> None:
        """Remove every record from the tracking table."""
        executor = self._require_executor()
        table = self.config.migration_table
        try:
            await executor.execute(self.queries.clear_table(table))
        except SQLAlchemyError as e:
            self.logger.error(f"Failed to reset migration table '{table}': {e}")
            raise QueryError(f"Could not reset migration table '{table}': {e}") from e

        self.logger.info(f"Reset migration table '{table}'")

    async def before_migration(self) -> None:
        """Clear the tracking table first when reset_execution is configured."""
        if self.config.reset_execution:
            await self.reset_executed()

    async def __aenter__(self) -> 'MigrationStore':
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
