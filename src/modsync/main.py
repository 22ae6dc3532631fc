"""Main application entry point."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from .config.settings import get_settings, AppSettings
from .config.loader import ConfigLoader, load_config_from_env
from .config.schema import SyncConfig
from .core.loader import ModuleLoadResult, ModuleResourceLoader
from .core.locator import DirectoryModuleLocator, ModuleLocator, StaticModuleLocator
from .stores.base import DestinationStore
from .stores.factory import StoreFactory
from .stores.models import StoreType
from .utils.logging import setup_logging, get_logger


class ModuleSyncApp:
    """Loads every configured module into the destination store."""

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        config: Optional[SyncConfig] = None,
        store: Optional[DestinationStore] = None,
        locator: Optional[ModuleLocator] = None
    ):
        """Initialize the application.

        Anything not passed in is built from settings and the module registry.
        """
        self.settings = settings or get_settings()
        self.logger = get_logger("ModuleSync")
        self.config = config or self._load_config()
        self.project_location = Path(self.config.project_location or self.settings.project_location)
        self.locator = locator or self._build_locator()
        self.store = store or self._build_store()

    def _load_config(self) -> SyncConfig:
        if self.settings.config_file:
            return ConfigLoader().load_from_file(self.settings.config_file)
        return load_config_from_env()

    def _build_locator(self) -> ModuleLocator:
        if self.config.modules:
            return StaticModuleLocator.from_config(self.config)
        if self.config.modules_dir:
            return DirectoryModuleLocator(self.config.modules_dir)
        return StaticModuleLocator({})

    def _build_store(self) -> DestinationStore:
        store_type = StoreType(self.settings.store.type)
        kwargs = {}
        if store_type == StoreType.LOCAL:
            # the local store defaults to the registry's project location
            kwargs["base_dir"] = self.settings.store.base_dir or self.project_location
        return StoreFactory.create_store(store_type, **kwargs)

    async def load_module(self, module_name: str) -> ModuleLoadResult:
        """Run migrations and import resources for one module."""
        loader = ModuleResourceLoader(
            module_name,
            store=self.store,
            locator=self.locator,
            project_location=self.project_location,
            concurrent_mappings=self.settings.sync.concurrent_mappings
        )
        return await loader.load()

    async def run(self, module_names: Optional[List[str]] = None) -> List[ModuleLoadResult]:
        """Load the selected modules (all known modules by default).

        With ``sync.fail_fast`` the first failure is re-raised; otherwise it is
        recorded on that module's result and the next module proceeds.
        """
        names = module_names or self.locator.list_modules()
        self.logger.info(
            "Starting module resource sync",
            app=self.settings.name,
            version=self.settings.version,
            environment=self.settings.environment,
            modules=names,
            project_location=str(self.project_location),
            store=self.settings.store.type
        )

        results = []
        for name in names:
            try:
                result = await self.load_module(name)
            except Exception as e:
                if self.settings.sync.fail_fast:
                    raise
                self.logger.error("Module load failed", module=name, error=str(e))
                result = ModuleLoadResult(module_name=name, success=False, error_message=str(e))
            results.append(result)

        failed = [r.module_name for r in results if not r.success]
        self.logger.info(
            "Module resource sync completed",
            modules=len(results),
            failed=failed
        )
        return results

    async def close(self):
        await self.store.close()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="modsync",
        description="Sync module resources into the destination store"
    )
    parser.add_argument("--config", help="Module registry file (YAML or JSON)")
    parser.add_argument(
        "--module",
        action="append",
        dest="modules",
        help="Only load this module (repeatable)"
    )
    return parser.parse_args(argv)


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    setup_logging()
    settings = get_settings()
    if args.config:
        settings = settings.model_copy(update={"config_file": args.config})

    app = ModuleSyncApp(settings=settings)
    try:
        results = await app.run(args.modules)
    finally:
        await app.close()

    return 0 if all(r.success for r in results) else 1


def run():
    """Console script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nShutdown requested by user")
        sys.exit(0)
    except Exception as e:
        print(f"Application failed with error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
