"""Shared fixtures for the module resource sync tests."""

from pathlib import Path
from typing import Dict, Optional

import pytest

from modsync.core import DirectoryModuleLocator
from modsync.stores import LocalDiskStore
from modsync.utils.logging import setup_logging


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    setup_logging(log_level="DEBUG", log_format="console", log_file=None)


def write_files(base: Path, files: Dict[str, str]) -> None:
    """Create ``files`` (relative path -> text) under ``base``."""
    for relative, content in files.items():
        target = base / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content.encode("utf-8"))


@pytest.fixture
def project_dir(tmp_path) -> Path:
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def modules_dir(tmp_path) -> Path:
    path = tmp_path / "modules"
    path.mkdir()
    return path


@pytest.fixture
def make_module(modules_dir):
    """Build a module folder from a ``{relative path: text}`` mapping."""

    def _make(name: str, files: Optional[Dict[str, str]] = None) -> Path:
        module_path = modules_dir / name
        module_path.mkdir(parents=True, exist_ok=True)
        write_files(module_path, files or {})
        return module_path

    return _make


@pytest.fixture
def store(project_dir) -> LocalDiskStore:
    return LocalDiskStore(project_dir)


@pytest.fixture
def locator(modules_dir) -> DirectoryModuleLocator:
    return DirectoryModuleLocator(modules_dir)
