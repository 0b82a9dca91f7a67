"""Configuration file loading for the migration store.

This module provides:
- YAML connection-parameter files with override support
- Environment variable overrides for the connection URL
- Schema validation of the loaded document
"""

import os
import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from jsonschema import Draft7Validator

from .config import OPTIONS_KEY
from .errors import ConfigurationError
from .logging_config import sanitize_log_message

logger = logging.getLogger(__name__)


# Shape of a connection-parameter document
CONFIG_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["url"],
    "properties": {
        "url": {"type": "string", "minLength": 1},
        "createDbOnConnect": {"type": "boolean"},
        OPTIONS_KEY: {
            "type": "object",
            "properties": {
                "migrationTable": {"type": "string", "minLength": 1},
                "migrationFile": {"type": "string", "minLength": 1},
                "nameFieldLength": {"type": "integer", "minimum": 1},
                "resetExecution": {"type": "boolean"},
                "createDbOnConnect": {"type": "boolean"}
            }
        },
        "logging": {
            "type": "object",
            "properties": {
                "level": {"type": "string", "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]},
                "log_file": {"type": "string"}
            }
        }
    }
}


class ConfigLoader:
    """Loads connection parameters from YAML with environment overrides."""

    # Environment variable mappings (dot path -> variable)
    ENV_MAPPINGS = {
        'url': 'MIGRATION_STORE_URL',
        f'{OPTIONS_KEY}.migrationTable': 'MIGRATION_STORE_TABLE',
    }

    def __init__(self, base_config_path: Union[str, Path]):
        """Initialize loader with a base configuration file.

        Args:
            base_config_path: Path to base configuration YAML file
        """
        self.base_config_path = Path(base_config_path)
        if not self.base_config_path.exists():
            raise FileNotFoundError(f"Base config not found: {base_config_path}")

        self.base_config = self._load_yaml_file(self.base_config_path)
        self.merged_config = deepcopy(self.base_config)
        self._apply_env_overrides()

    def _load_yaml_file(self, path: Path) -> Dict[str, Any]:
        """Safely load YAML file.

        Args:
            path: Path to YAML file

        Returns:
            Loaded configuration dictionary
        """
        try:
            with open(path, 'r') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse YAML file {path}: {e}")
            raise ConfigurationError(f"Failed to parse YAML file {path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigurationError(
                f"Config file must contain a mapping, got {type(config).__name__}"
            )

        return config

    def merge_override(self, override_path: Union[str, Path]) -> None:
        """Merge override configuration file.

        Args:
            override_path: Path to override configuration file
        """
        override_path = Path(override_path)
        if not override_path.exists():
            raise FileNotFoundError(f"Override config not found: {override_path}")

        override_config = self._load_yaml_file(override_path)
        self.merged_config = self._deep_merge(self.merged_config, override_config)
        self._apply_env_overrides()

        logger.info(f"Merged override config from: {override_path}")

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        result = deepcopy(base)

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = deepcopy(value)

        return result

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides to configuration."""
        for config_path, env_var in self.ENV_MAPPINGS.items():
            env_value = os.environ.get(env_var)
            if env_value:
                self._set_nested_value(self.merged_config, config_path, env_value)
                logger.info(f"Applied environment override for {config_path}")

    def _set_nested_value(self, config: Dict[str, Any], path: str, value: Any) -> None:
        keys = path.split('.')
        current = config

        for key in keys[:-1]:
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value

    def validate(self) -> None:
        """Validate the merged configuration.

        Raises:
            ConfigurationError: Listing every schema violation found
        """
        validator = Draft7Validator(CONFIG_SCHEMA)
        errors = sorted(validator.iter_errors(self.merged_config), key=lambda e: list(e.path))
        if not errors:
            logger.debug("Configuration validation successful")
            return

        messages = []
        for error in errors:
            location = '.'.join(str(p) for p in error.path) or '<root>'
            messages.append(f"{location}: {sanitize_log_message(error.message)}")
        logger.error(f"Configuration validation failed: {'; '.join(messages)}")
        raise ConfigurationError(f"Invalid configuration: {'; '.join(messages)}")

    def get_params(self) -> Dict[str, Any]:
        """Validated connection parameters, ready for MigrationStore."""
        self.validate()
        return deepcopy(self.merged_config)


def load_store_params(config_path: Union[str, Path],
                      override_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Load connection parameters from YAML.

    Args:
        config_path: Path to base configuration
        override_path: Optional override configuration path

    Returns:
        Connection parameters dictionary
    """
    loader = ConfigLoader(config_path)

    if override_path:
        loader.merge_override(override_path)

    return loader.get_params()
