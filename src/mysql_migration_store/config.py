"""
Store configuration and async engine construction
"""

from typing import Dict, Any, Mapping, Optional, Union
import logging
import re

from pydantic import BaseModel, Field, ValidationError, field_validator
from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from .errors import ConfigurationError, ParseError
from .queries import QUERIES_BY_BACKEND
from .url import get_backend_name, parse_url, redact_url

logger = logging.getLogger(__name__)

# Key of the nested block holding adapter-specific overrides
OPTIONS_KEY = 'mysql'

DEFAULT_MIGRATION_TABLE = '_migrations'
DEFAULT_MIGRATION_FILE = 'migration_template.py'
DEFAULT_NAME_FIELD_LENGTH = 50

_IDENTIFIER = re.compile(r'^[A-Za-z_][A-Za-z0-9_$]*$')


class StoreConfig(BaseModel):
    """
    Merged configuration of a migration store.

    Field names are snake_case; the camelCase keys used by migration-runner
    hosts (``migrationTable``, ``nameFieldLength`` ...) are accepted as aliases.
    """

    url: str = Field(..., min_length=1, description="Connection URL including the database name")
    migration_table: str = Field(
        default=DEFAULT_MIGRATION_TABLE, alias='migrationTable',
        description="Name of the tracking table"
    )
    migration_file: str = Field(
        default=DEFAULT_MIGRATION_FILE, alias='migrationFile',
        description="File name of the bundled migration template"
    )
    name_field_length: int = Field(
        default=DEFAULT_NAME_FIELD_LENGTH, ge=1, alias='nameFieldLength',
        description="Maximum length of a migration name"
    )
    reset_execution: bool = Field(
        default=False, alias='resetExecution',
        description="Clear the tracking table before every migration batch"
    )
    create_db_on_connect: bool = Field(
        default=False, alias='createDbOnConnect',
        description="Create the target database before connecting to it"
    )

    @field_validator('url')
    @classmethod
    def validate_url_backend(cls, v):
        """Database type named by the URL must have a query builder."""
        try:
            backend = get_backend_name(v)
        except ParseError:
            # unparseable URLs are reported by connect
            return v
        if backend not in QUERIES_BY_BACKEND:
            raise ValueError(
                f"Unsupported database type '{backend}', expected one of {sorted(QUERIES_BY_BACKEND)}"
            )
        return v

    @field_validator('migration_table')
    @classmethod
    def validate_migration_table(cls, v):
        """Table name must be a plain SQL identifier."""
        if not _IDENTIFIER.match(v):
            raise ValueError(f"Table name '{v}' contains invalid characters")
        return v

    @field_validator('migration_file')
    @classmethod
    def validate_migration_file(cls, v):
        """Template file name must not point outside the templates directory."""
        if not v or '/' in v or '\\' in v or v in ('.', '..'):
            raise ValueError(f"Template file name '{v}' is not a plain file name")
        return v

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
        extra = 'ignore'

    @classmethod
    def from_params(cls, params: Optional[Mapping[str, Any]]) -> 'StoreConfig':
        """
        Build configuration from host-supplied connection parameters.

        The adapter overrides live in the nested ``mysql`` block;
        ``createDbOnConnect`` is also honoured at the top level.

        Args:
            params: Mapping with a required ``url`` key

        Returns:
            Validated StoreConfig

        Raises:
            ConfigurationError: If ``url`` is missing or a value is invalid
        """
        params = params or {}
        if not params.get('url'):
            raise ConfigurationError("Connect params should include a 'url'")

        options = params.get(OPTIONS_KEY) or {}
        if not isinstance(options, Mapping):
            raise ConfigurationError(
                f"'{OPTIONS_KEY}' block must be a mapping, got {type(options).__name__}"
            )

        aliases = {field.alias: name for name, field in cls.model_fields.items() if field.alias}

        merged: Dict[str, Any] = {'url': params['url']}
        for key in ('createDbOnConnect', 'create_db_on_connect'):
            if key in params:
                merged['create_db_on_connect'] = params[key]
        for key, value in options.items():
            field = aliases.get(key, key)
            if field == 'url':
                logger.warning(f"Ignoring 'url' inside the '{OPTIONS_KEY}' block, the top-level url is used")
                continue
            merged[field] = value

        try:
            return cls(**merged)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid store configuration: {e}") from e

    @property
    def safe_url(self) -> str:
        """Connection URL with the password masked."""
        return redact_url(self.url)


def build_async_engine(url: Union[str, URL], **engine_args) -> AsyncEngine:
    """
    Create an SQLAlchemy async engine for a connection URL

    Args:
        url: Connection URL; bare backends get their default async driver
        engine_args: Extra keyword arguments for create_async_engine

    Returns:
        AsyncEngine holding at most one connection at a time
    """
    async_url = parse_url(url)

    engine_args.setdefault('poolclass', NullPool)
    engine_args.setdefault('echo', False)

    logger.debug(f"Creating {async_url.get_backend_name()} engine: {redact_url(async_url)}")
    return create_async_engine(async_url, **engine_args)


def get_default_config(url: str) -> Dict[str, Any]:
    """
    Get default connection parameters for a URL

    Args:
        url: Connection URL

    Returns:
        Parameters dictionary in the shape accepted by StoreConfig.from_params
    """
    return {
        'url': url,
        OPTIONS_KEY: {
            'migrationTable': DEFAULT_MIGRATION_TABLE,
            'migrationFile': DEFAULT_MIGRATION_FILE,
            'nameFieldLength': DEFAULT_NAME_FIELD_LENGTH,
            'resetExecution': False,
            'createDbOnConnect': False,
        }
    }
