"""Configuration loader for the module registry (JSON/YAML files)."""

import os
import json
import yaml
from pathlib import Path
from typing import Dict, Any, Union

from pydantic import ValidationError

from .schema import SyncConfig
from ..utils.logging import get_logger


class ConfigurationError(Exception):
    """Raised when configuration loading fails."""
    pass


class ConfigLoader:
    """Loads and validates the module registry from files or dictionaries."""

    def __init__(self):
        self.logger = get_logger(self.__class__.__name__)

    def load_from_file(self, file_path: Union[str, Path]) -> SyncConfig:
        """Load configuration from JSON or YAML file.

        Relative module paths are resolved against the directory holding the
        configuration file.

        Args:
            file_path: Path to configuration file

        Returns:
            Validated SyncConfig object

        Raises:
            ConfigurationError: If file cannot be loaded or validated
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise ConfigurationError(f"Configuration file not found: {file_path}")

        self.logger.info("Loading configuration from file", file_path=str(file_path))

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                if file_path.suffix.lower() in ['.yaml', '.yml']:
                    data = yaml.safe_load(f)
                elif file_path.suffix.lower() == '.json':
                    data = json.load(f)
                else:
                    raise ConfigurationError(f"Unsupported file format: {file_path.suffix}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML format: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON format: {e}") from e

        config = self.load_from_dict(data or {}, base_dir=file_path.parent)

        self.logger.info(
            "Configuration loaded successfully",
            modules_count=len(config.modules),
            file_path=str(file_path)
        )

        return config

    def load_from_dict(self, data: Dict[str, Any], base_dir: Union[str, Path, None] = None) -> SyncConfig:
        """Load configuration from dictionary.

        Args:
            data: Configuration data as dictionary
            base_dir: Directory that relative paths are resolved against

        Returns:
            Validated SyncConfig object
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration root must be a mapping")

        try:
            config = SyncConfig(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Failed to load configuration from dict: {e}") from e

        if base_dir is not None:
            config = self._resolve_paths(config, Path(base_dir))

        return config

    def _resolve_paths(self, config: SyncConfig, base_dir: Path) -> SyncConfig:
        """Resolve relative paths against the configuration's directory."""

        def resolve(value):
            if value is None:
                return None
            path = Path(value).expanduser()
            return str(path if path.is_absolute() else (base_dir / path).resolve())

        modules = [
            module.model_copy(update={"path": resolve(module.path)})
            for module in config.modules
        ]
        return config.model_copy(update={
            "project_location": resolve(config.project_location),
            "modules_dir": resolve(config.modules_dir),
            "modules": modules,
        })


def load_config_from_env() -> SyncConfig:
    """Load configuration from environment variables and default files.

    Looks for configuration files in this order:
    1. MODSYNC_CONFIG_FILE environment variable
    2. ./config/modsync.yaml (.yml, .json)
    3. ./modsync.yaml (.yml, .json)

    If no file is found, an empty registry is returned.
    """
    loader = ConfigLoader()
    logger = get_logger("load_config_from_env")

    config_file = os.getenv('MODSYNC_CONFIG_FILE')
    if config_file:
        if os.path.exists(config_file):
            return loader.load_from_file(config_file)
        logger.warning("Specified config file not found", file=config_file)

    possible_files = [
        './config/modsync.yaml',
        './config/modsync.yml',
        './config/modsync.json',
        './modsync.yaml',
        './modsync.yml',
        './modsync.json'
    ]

    for file_path in possible_files:
        if os.path.exists(file_path):
            logger.info("Found configuration file", file=file_path)
            return loader.load_from_file(file_path)

    logger.info("No configuration file found, using an empty module registry")
    return SyncConfig()
