"""Managed module resource synchronization."""

# config must load before the packages whose modules import its logging helpers
from . import config
from .core import ModuleResourceLoader, ResourceSyncPlanner, MigrationRunner, DriftDetector
from .stores import DestinationStore, StoreFactory

__version__ = "1.0.0"

__all__ = [
    "config",
    "ModuleResourceLoader",
    "ResourceSyncPlanner",
    "MigrationRunner",
    "DriftDetector",
    "DestinationStore",
    "StoreFactory",
]
