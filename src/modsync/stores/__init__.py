"""Destination stores receiving synced module resources."""

from .base import (
    DestinationStore,
    StoreError,
    FileNotFoundInStoreError,
    DEFAULT_ROOT
)

from .models import StoreType, StoredFileModel
from .local import LocalDiskStore
from .database import DatabaseManager, DatabaseStore
from .factory import StoreFactory

__all__ = [
    # Base classes and exceptions
    "DestinationStore",
    "StoreError",
    "FileNotFoundInStoreError",
    "DEFAULT_ROOT",

    # Store implementations
    "StoreType",
    "StoredFileModel",
    "LocalDiskStore",
    "DatabaseManager",
    "DatabaseStore",

    # Factory
    "StoreFactory"
]
