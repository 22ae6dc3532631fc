"""Exceptions raised by the sync engine."""

from typing import Optional


class SyncEngineError(Exception):
    """Base exception for sync engine errors."""
    pass


class ModuleNotLoadedError(SyncEngineError):
    """Raised when a module id has no known location."""

    def __init__(self, module_name: str):
        super().__init__(f"Module is not loaded: {module_name}")
        self.module_name = module_name


class ResourceCopyError(SyncEngineError):
    """Raised when copying a module's resources to the destination fails."""

    MESSAGE = "Error copying module resources"

    def __init__(self, source: str, destination: str, cause: Optional[BaseException] = None):
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{self.MESSAGE}{detail}")
        self.source = source
        self.destination = destination


class MigrationError(SyncEngineError):
    """Raised when a module's migration script cannot be applied."""

    def __init__(self, migration_file: str, module_name: str, cause: Optional[BaseException] = None):
        detail = f": {cause}" if cause is not None else ""
        super().__init__(
            f'Error in migration script "{migration_file}" of module "{module_name}"{detail}'
        )
        self.migration_file = migration_file
        self.module_name = module_name


class MigrationParseError(MigrationError):
    """Raised when a migration descriptor is not valid structured data."""
    pass
