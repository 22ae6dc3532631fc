"""Core resource sync logic package."""

from .errors import (
    SyncEngineError,
    ModuleNotLoadedError,
    ResourceCopyError,
    MigrationError,
    MigrationParseError
)
from .hashing import ContentHasher
from .checksum import ChecksumMarker, CHECKSUM_PREFIX
from .drift import DriftDetector, DriftState
from .locator import ModuleLocator, StaticModuleLocator, DirectoryModuleLocator
from .planner import (
    ExportMapping,
    MappingAction,
    MappingResult,
    ResourceSyncPlanner,
    SkipReason
)
from .migrations import (
    MigrationResult,
    MigrationRunner,
    MIGRATIONS_FILE,
    parse_migration_descriptor
)
from .loader import ImportResult, ModuleLoadResult, ModuleResourceLoader

__all__ = [
    "SyncEngineError",
    "ModuleNotLoadedError",
    "ResourceCopyError",
    "MigrationError",
    "MigrationParseError",
    "ContentHasher",
    "ChecksumMarker",
    "CHECKSUM_PREFIX",
    "DriftDetector",
    "DriftState",
    "ModuleLocator",
    "StaticModuleLocator",
    "DirectoryModuleLocator",
    "ExportMapping",
    "MappingAction",
    "MappingResult",
    "ResourceSyncPlanner",
    "SkipReason",
    "MigrationResult",
    "MigrationRunner",
    "MIGRATIONS_FILE",
    "parse_migration_descriptor",
    "ImportResult",
    "ModuleLoadResult",
    "ModuleResourceLoader"
]
