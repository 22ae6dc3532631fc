"""Base destination store interface and common functionality."""

import posixpath
from abc import ABC, abstractmethod
from typing import Union

from ..utils.logging import get_logger


DEFAULT_ROOT = "/"


class DestinationStore(ABC):
    """Abstract base class for persisted-file backends receiving synced resources.

    Every operation addresses a file by a logical ``root`` and a ``path``
    relative to it. Both are joined and normalised into a POSIX key, so
    ``("/", "/actions/mod/a.js")`` and ``("/actions", "mod/a.js")`` name the
    same file.
    """

    def __init__(self, **kwargs):
        self.logger = get_logger(self.__class__.__name__)

    @staticmethod
    def normalize_path(root: str, path: str) -> str:
        """Join ``root`` and ``path`` into a store key without a leading slash.

        Raises:
            StoreError: If the path resolves outside of the store root
        """
        root_part = (root or DEFAULT_ROOT).replace("\\", "/").strip("/")
        path_part = path.replace("\\", "/").lstrip("/")
        key = posixpath.normpath(posixpath.join(root_part, path_part))
        if key in (".", "..") or key.startswith("../"):
            raise StoreError(f"Invalid store path: root={root!r} path={path!r}")
        return key

    @abstractmethod
    async def file_exists(self, root: str, path: str) -> bool:
        """Check whether a file exists in the store."""
        pass

    @abstractmethod
    async def read_bytes(self, root: str, path: str) -> bytes:
        """Read a file's raw content.

        Raises:
            FileNotFoundInStoreError: If the file does not exist
        """
        pass

    async def read_text(self, root: str, path: str) -> str:
        """Read a file's content decoded as UTF-8."""
        content = await self.read_bytes(root, path)
        try:
            return content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise StoreError(f"File is not valid UTF-8 text: {path}") from e

    @abstractmethod
    async def upsert_file(self, root: str, path: str, content: Union[bytes, str]) -> None:
        """Create or overwrite a file. Text content is encoded as UTF-8."""
        pass

    @abstractmethod
    async def delete_file(self, root: str, path: str) -> bool:
        """Delete a file.

        Returns:
            True if a file was deleted, False if there was nothing to delete
        """
        pass

    async def close(self) -> None:
        """Release any resources held by the store."""
        pass

    @staticmethod
    def _to_bytes(content: Union[bytes, str]) -> bytes:
        if isinstance(content, str):
            return content.encode("utf-8")
        if isinstance(content, (bytes, bytearray, memoryview)):
            return bytes(content)
        raise TypeError(f"Expected bytes or str content, got {type(content).__name__}")


class StoreError(Exception):
    """Raised when a destination store operation fails."""
    pass


class FileNotFoundInStoreError(StoreError):
    """Raised when reading a file that does not exist in the store."""

    def __init__(self, path: str):
        super().__init__(f"File not found in store: {path}")
        self.path = path
