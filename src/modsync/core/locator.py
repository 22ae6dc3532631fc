"""Module location lookup injected into the resource loader."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Union

from .errors import ModuleNotLoadedError
from ..config.schema import SyncConfig


class ModuleLocator(ABC):
    """Maps module identifiers to their base directory on disk."""

    @abstractmethod
    def get_module_path(self, module_name: str) -> Path:
        """Get the module's base directory.

        Raises:
            ModuleNotLoadedError: If the module is unknown
        """
        pass

    @abstractmethod
    def list_modules(self) -> List[str]:
        """List known module identifiers."""
        pass


class StaticModuleLocator(ModuleLocator):
    """Locator over an explicit ``{module: path}`` table."""

    def __init__(self, modules: Dict[str, Union[str, Path]]):
        self._modules = {name: Path(path) for name, path in modules.items()}

    @classmethod
    def from_config(cls, config: SyncConfig) -> "StaticModuleLocator":
        """Build a locator from the enabled modules of a registry."""
        return cls({module.name: module.path for module in config.get_enabled_modules()})

    def get_module_path(self, module_name: str) -> Path:
        try:
            return self._modules[module_name]
        except KeyError:
            raise ModuleNotLoadedError(module_name) from None

    def list_modules(self) -> List[str]:
        return list(self._modules)


class DirectoryModuleLocator(ModuleLocator):
    """Every subdirectory of ``modules_dir`` is a module named after it."""

    def __init__(self, modules_dir: Union[str, Path]):
        self.modules_dir = Path(modules_dir)

    def get_module_path(self, module_name: str) -> Path:
        path = self.modules_dir / module_name
        if module_name in ("", ".", "..") or "/" in module_name or not path.is_dir():
            raise ModuleNotLoadedError(module_name)
        return path

    def list_modules(self) -> List[str]:
        if not self.modules_dir.is_dir():
            return []
        return sorted(
            entry.name for entry in self.modules_dir.iterdir()
            if entry.is_dir() and not entry.name.startswith(".")
        )
