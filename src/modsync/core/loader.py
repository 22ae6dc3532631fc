"""Per-module entry points called when an extension module is loaded."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from .locator import ModuleLocator
from .migrations import MigrationResult, MigrationRunner, find_migration_file
from .planner import MappingAction, MappingResult, ResourceSyncPlanner
from ..stores.base import DestinationStore, DEFAULT_ROOT
from ..utils.logging import get_logger, log_async_execution_time


@dataclass
class ImportResult:
    """Result of importing one module's resources."""

    module_name: str
    mappings: List[MappingResult] = field(default_factory=list)

    @property
    def mappings_synced(self) -> int:
        return sum(1 for m in self.mappings if m.action != MappingAction.SKIPPED)

    @property
    def files_written(self) -> int:
        return sum(m.files_written for m in self.mappings)

    @property
    def files_preserved(self) -> int:
        return sum(m.files_preserved for m in self.mappings)

    @property
    def files_unchanged(self) -> int:
        return sum(m.files_unchanged for m in self.mappings)


@dataclass
class ModuleLoadResult:
    """Outcome of a full module load (migrations, then resource import)."""

    module_name: str
    success: bool = False
    migration: Optional[MigrationResult] = None
    resources: Optional[ImportResult] = None
    error_message: Optional[str] = None


class ModuleResourceLoader:
    """Runs migrations and imports resources for a single module."""

    def __init__(
        self,
        module_name: str,
        store: DestinationStore,
        locator: ModuleLocator,
        project_location: Union[str, Path],
        concurrent_mappings: bool = False,
        root: str = DEFAULT_ROOT
    ):
        """Initialize the loader.

        Args:
            module_name: Module identifier
            store: Destination store receiving tracked resources
            locator: Lookup of module base directories
            project_location: Local directory for unconditional copies
            concurrent_mappings: Sync independent mappings concurrently
            root: Store root all destination paths are relative to
        """
        self.module_name = module_name
        self.store = store
        self.locator = locator
        self.concurrent_mappings = concurrent_mappings
        self.planner = ResourceSyncPlanner(store, locator, project_location, root=root)
        self.migrations = MigrationRunner(store, module_name, root=root)
        self.logger = get_logger(self.__class__.__name__).bind(module=module_name)

    @property
    def module_path(self) -> Path:
        return self.locator.get_module_path(self.module_name)

    @log_async_execution_time
    async def run_migrations(self) -> Optional[MigrationResult]:
        """Apply the module's migrations.json, if it ships one."""
        migration_file = find_migration_file(self.module_path)
        if migration_file is None:
            return None
        return await self.migrations.run(migration_file)

    @log_async_execution_time
    async def import_resources(self) -> ImportResult:
        """Sync every export mapping of the module into the destination."""
        mappings = self.planner.plan(self.module_name)
        results = await self.planner.execute_all(mappings, concurrent=self.concurrent_mappings)

        result = ImportResult(module_name=self.module_name, mappings=results)
        self.logger.info(
            "Module resources imported",
            mappings=len(mappings),
            synced=result.mappings_synced,
            written=result.files_written,
            preserved=result.files_preserved,
            unchanged=result.files_unchanged
        )
        return result

    def get_bot_template_path(self, template_name: str) -> Path:
        """Absolute path of a bot template shipped by the module."""
        return (self.module_path / "dist" / "bot-templates" / template_name).resolve()

    async def load(self) -> ModuleLoadResult:
        """Handle a module-load event: migrations first, then resources.

        Errors propagate; the caller decides whether a failing module blocks
        the others.
        """
        result = ModuleLoadResult(module_name=self.module_name)
        result.migration = await self.run_migrations()
        result.resources = await self.import_resources()
        result.success = True
        return result
