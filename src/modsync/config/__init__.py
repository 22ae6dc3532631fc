"""Configuration package for the module resource sync engine."""

from .settings import (
    StoreSettings,
    SyncSettings,
    LoggingSettings,
    AppSettings,
    get_settings
)

from .schema import (
    ModuleConfig,
    SyncConfig,
    MigrationInstruction
)

from .loader import (
    ConfigLoader,
    ConfigurationError,
    load_config_from_env
)

__all__ = [
    "StoreSettings",
    "SyncSettings",
    "LoggingSettings",
    "AppSettings",
    "get_settings",

    "ModuleConfig",
    "SyncConfig",
    "MigrationInstruction",

    "ConfigLoader",
    "ConfigurationError",
    "load_config_from_env"
]
