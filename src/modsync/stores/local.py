"""Destination store backed by a directory on local disk."""

from pathlib import Path
from typing import Union

from .base import DestinationStore, FileNotFoundInStoreError, StoreError


class LocalDiskStore(DestinationStore):
    """Stores files under ``base_dir``. Content is written byte for byte."""

    def __init__(self, base_dir: Union[str, Path], **kwargs):
        super().__init__(**kwargs)
        self.base_dir = Path(base_dir).resolve()
        self.logger.debug("Local disk store initialized", base_dir=str(self.base_dir))

    def _resolve(self, root: str, path: str) -> Path:
        return self.base_dir / self.normalize_path(root, path)

    async def file_exists(self, root: str, path: str) -> bool:
        return self._resolve(root, path).is_file()

    async def read_bytes(self, root: str, path: str) -> bytes:
        target = self._resolve(root, path)
        if not target.is_file():
            raise FileNotFoundInStoreError(self.normalize_path(root, path))
        try:
            return target.read_bytes()
        except OSError as e:
            raise StoreError(f"Failed to read {target}: {e}") from e

    async def upsert_file(self, root: str, path: str, content: Union[bytes, str]) -> None:
        target = self._resolve(root, path)
        data = self._to_bytes(content)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise StoreError(f"Failed to write {target}: {e}") from e

    async def delete_file(self, root: str, path: str) -> bool:
        target = self._resolve(root, path)
        if not target.is_file():
            return False
        try:
            target.unlink()
        except OSError as e:
            raise StoreError(f"Failed to delete {target}: {e}") from e
        return True
