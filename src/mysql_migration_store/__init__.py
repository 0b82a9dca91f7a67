"""
MySQL migration-state store for migration-runner hosts.

This package provides the storage backend a migration runner needs:
- Connection lifecycle with optional database creation
- Idempotent bootstrap of the tracking table
- Mark / unmark / reset / list of executed migration names
- Bundled template for new migration files
"""

from .backend import MigrationBackend
from .config import StoreConfig, build_async_engine, get_default_config
from .config_loader import ConfigLoader, load_store_params
from .engine_factory import StoreFactory
from .errors import (
    MigrationStoreError,
    ConfigurationError,
    ParseError,
    DatabaseConnectionError,
    SchemaError,
    QueryError,
    DuplicateMigrationError,
)
from .executor import QueryExecutor, SQLAlchemyExecutor
from .logging_config import setup_store_logging, StoreLoggerAdapter, SensitiveDataFilter
from .store import MigrationStore

__version__ = "1.0.0"
__all__ = [
    # Core components
    "MigrationBackend",
    "MigrationStore",
    "StoreFactory",
    "QueryExecutor",
    "SQLAlchemyExecutor",

    # Configuration
    "StoreConfig",
    "ConfigLoader",
    "build_async_engine",
    "get_default_config",
    "load_store_params",
    "setup_store_logging",
    "StoreLoggerAdapter",
    "SensitiveDataFilter",

    # Errors
    "MigrationStoreError",
    "ConfigurationError",
    "ParseError",
    "DatabaseConnectionError",
    "SchemaError",
    "QueryError",
    "DuplicateMigrationError",
]
