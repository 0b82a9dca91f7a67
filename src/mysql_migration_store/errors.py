"""
Error taxonomy for the migration store.

Every failure raised by the store derives from MigrationStoreError so the
host runner can catch the whole family in one place.
"""


class MigrationStoreError(Exception):
    """Base exception for migration store errors."""
    pass


class ConfigurationError(MigrationStoreError, ValueError):
    """Raised when connection parameters are missing or invalid."""
    pass


class ParseError(MigrationStoreError, ValueError):
    """Raised when the connection URL cannot be parsed."""
    pass


class DatabaseConnectionError(MigrationStoreError, ConnectionError):
    """Raised when a database connection cannot be opened or is not open."""
    pass


class SchemaError(MigrationStoreError):
    """Raised when the tracking table cannot be created."""
    pass


class QueryError(MigrationStoreError):
    """Raised when a statement against the tracking table fails."""
    pass


class DuplicateMigrationError(QueryError):
    """Raised when a migration name is already recorded as executed."""

    def __init__(self, name: str, message: str = ""):
        self.name = name
        super().__init__(message or f"Migration '{name}' is already marked as executed")
