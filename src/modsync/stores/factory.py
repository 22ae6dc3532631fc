"""Store factory for creating destination store instances."""

from typing import Dict, Type, List, Union
from ..config.settings import get_settings
from .base import DestinationStore
from .database import DatabaseStore
from .local import LocalDiskStore
from .models import StoreType


class StoreFactory:
    """Factory for creating destination store instances."""

    _store_classes: Dict[StoreType, Type[DestinationStore]] = {
        StoreType.LOCAL: LocalDiskStore,
        StoreType.DATABASE: DatabaseStore,
    }

    @classmethod
    def create_store(
        cls,
        store_type: Union[StoreType, str],
        **kwargs
    ) -> DestinationStore:
        """Create a destination store instance.

        Settings supply defaults for any backend argument not passed explicitly.

        Args:
            store_type: Type of store (local, database)
            **kwargs: Backend-specific parameters

        Returns:
            Configured store instance

        Raises:
            ValueError: If store type is not supported
        """
        settings = get_settings()

        try:
            store_type = StoreType(store_type)
        except ValueError:
            raise ValueError(f"Unsupported store type: {store_type}") from None

        if store_type not in cls._store_classes:
            raise ValueError(f"Unsupported store type: {store_type}")

        store_class = cls._store_classes[store_type]

        if store_type == StoreType.LOCAL:
            kwargs.setdefault("base_dir", settings.store.base_dir or settings.project_location)
        elif store_type == StoreType.DATABASE:
            if "db_manager" not in kwargs:
                kwargs.setdefault("database_url", settings.store.database_url)

        return store_class(**kwargs)

    @classmethod
    def get_supported_types(cls) -> List[StoreType]:
        """Get list of supported store types."""
        return list(cls._store_classes.keys())

    @classmethod
    def register_store(cls, store_type: StoreType, store_class: Type[DestinationStore]):
        """Register a new store type.

        Args:
            store_type: Type of store
            store_class: Store class to register
        """
        cls._store_classes[store_type] = store_class
