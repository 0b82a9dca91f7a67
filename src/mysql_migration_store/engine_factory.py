"""
Store factory for creating migration stores from host configuration
"""

from pathlib import Path
from typing import Any, List, Mapping, Optional, Union
import logging

from .config_loader import load_store_params
from .logging_config import setup_store_logging
from .queries import QUERIES_BY_BACKEND
from .store import MigrationStore

logger = logging.getLogger(__name__)


class StoreFactory:
    """Factory for creating migration stores"""

    @staticmethod
    def create_store(params: Mapping[str, Any]) -> MigrationStore:
        """
        Create migration store from connection parameters

        Args:
            params: Connection parameters with 'url' and an optional 'mysql' block

        Returns:
            Unconnected MigrationStore
        """
        store = MigrationStore(params)
        logger.info(f"Created migration store for {store.config.safe_url}")
        return store

    @staticmethod
    def create_from_file(config_path: Union[str, Path],
                         override_path: Optional[Union[str, Path]] = None) -> MigrationStore:
        """
        Create migration store from a YAML configuration file

        A ``logging`` section in the file, when present, configures store logging.

        Args:
            config_path: Path to the configuration file
            override_path: Optional override file merged over it

        Returns:
            Unconnected MigrationStore
        """
        params = load_store_params(config_path, override_path)
        if 'logging' in params:
            setup_store_logging(params)
        return StoreFactory.create_store(params)

    @staticmethod
    def get_supported_databases() -> List[str]:
        """
        Get list of supported database types

        Returns:
            List of supported database type strings
        """
        return sorted(QUERIES_BY_BACKEND)
