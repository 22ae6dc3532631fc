"""Export mapping planning and drift-aware resource sync."""

import asyncio
import functools
import posixpath
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from .checksum import ChecksumMarker
from .drift import DriftDetector, DriftState
from .errors import ResourceCopyError
from .hashing import ContentHasher, decode_text, encode_text
from .locator import ModuleLocator
from ..stores.base import DestinationStore, DEFAULT_ROOT
from ..utils.logging import get_logger


@dataclass(frozen=True)
class ExportMapping:
    """A directory-level sync rule from a module folder to the destination."""

    source: Path
    destination: str
    skip_drift_check: bool = False
    is_tracked: bool = False


class MappingAction(str, Enum):
    """What was done for a mapping."""
    UPSERT = "upsert"
    COPY = "copy"
    SKIPPED = "skipped"


class SkipReason(str, Enum):
    """Why a mapping was not synced."""
    MISSING_SOURCE = "missing_source"
    SYMLINK = "symlink"


@dataclass
class MappingResult:
    """Result of executing one export mapping."""

    mapping: ExportMapping
    action: MappingAction
    skip_reason: Optional[SkipReason] = None
    written: List[str] = field(default_factory=list)
    preserved: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)

    @property
    def files_written(self) -> int:
        return len(self.written)

    @property
    def files_preserved(self) -> int:
        """Files left alone because they were edited by hand."""
        return len(self.preserved)

    @property
    def files_unchanged(self) -> int:
        return len(self.unchanged)


class ResourceSyncPlanner:
    """Builds a module's export mappings and syncs them into the store.

    Tracked mappings go through the checksum-aware upsert path: new and
    untouched destination files are (re)written and stamped, files whose
    marker no longer matches their content are preserved. Untracked mappings
    are copied unconditionally into ``project_location`` on local disk.
    """

    def __init__(
        self,
        store: DestinationStore,
        locator: ModuleLocator,
        project_location: Union[str, Path],
        detector: Optional[DriftDetector] = None,
        root: str = DEFAULT_ROOT
    ):
        self.store = store
        self.locator = locator
        self.project_location = Path(project_location)
        self.root = root
        self.hasher = ContentHasher()
        self.marker = ChecksumMarker(hasher=self.hasher)
        self.detector = detector or DriftDetector(marker=self.marker, hasher=self.hasher)
        self.logger = get_logger(self.__class__.__name__)

    def plan(self, module_name: str) -> List[ExportMapping]:
        """List the export mappings of a module, static entries first."""
        module_path = self.locator.get_module_path(module_name)

        mappings = [
            ExportMapping(
                source=module_path / "dist" / "actions",
                destination=f"/actions/{module_name}",
                is_tracked=True
            ),
            ExportMapping(
                source=module_path / "assets",
                destination=f"/assets/modules/{module_name}",
                skip_drift_check=True
            ),
            ExportMapping(
                source=module_path / "dist" / "content-types",
                destination=f"/content-types/{module_name}",
                is_tracked=True
            ),
        ]
        mappings.extend(self._hook_mappings(module_name, module_path))
        return mappings

    def _hook_mappings(self, module_name: str, module_path: Path) -> List[ExportMapping]:
        hooks_dir = module_path / "dist" / "hooks"
        if not hooks_dir.is_dir():
            return []

        return [
            ExportMapping(
                source=hook_dir,
                destination=f"/hooks/{hook_dir.name}/{module_name}",
                is_tracked=True
            )
            for hook_dir in sorted(hooks_dir.iterdir(), key=lambda p: p.name)
            if hook_dir.is_dir()
        ]

    def _destination_on_disk(self, destination: str) -> Path:
        return self.project_location / destination.lstrip("/")

    def is_symbolic_link(self, destination: str) -> bool:
        """Whether the destination root on disk is a symlink (e.g. a linked dev folder).

        The link must resolve; a dangling link is not treated as an override.
        """
        target = self._destination_on_disk(destination)
        return target.exists() and target.is_symlink()

    async def execute(self, mapping: ExportMapping) -> MappingResult:
        """Sync one mapping into the destination.

        Raises:
            ResourceCopyError: If any read, write or copy fails. Files synced
                before the failure stay written.
        """
        if not mapping.source.is_dir():
            self.logger.debug("Skipping mapping without source", source=str(mapping.source))
            return MappingResult(mapping, MappingAction.SKIPPED, SkipReason.MISSING_SOURCE)

        if self.is_symbolic_link(mapping.destination):
            self.logger.info(
                "Skipping symlinked destination",
                destination=mapping.destination
            )
            return MappingResult(mapping, MappingAction.SKIPPED, SkipReason.SYMLINK)

        try:
            if mapping.skip_drift_check or not mapping.is_tracked:
                return await self._copy_tree(mapping)
            return await self._update_outdated_files(mapping)
        except ResourceCopyError:
            raise
        except Exception as e:
            raise ResourceCopyError(str(mapping.source), mapping.destination, e) from e

    async def execute_all(
        self,
        mappings: List[ExportMapping],
        concurrent: bool = False
    ) -> List[MappingResult]:
        """Execute mappings in order, or all at once when ``concurrent`` is set.

        Concurrent mappings all run to completion; the first failure (in
        mapping order) is raised afterwards.
        """
        if concurrent:
            results = await asyncio.gather(
                *(self.execute(m) for m in mappings),
                return_exceptions=True
            )
            for outcome in results:
                if isinstance(outcome, BaseException):
                    raise outcome
            return list(results)

        results = []
        for mapping in mappings:
            results.append(await self.execute(mapping))
        return results

    async def _copy_tree(self, mapping: ExportMapping) -> MappingResult:
        target = self._destination_on_disk(mapping.destination)
        await asyncio.get_running_loop().run_in_executor(
            None,
            functools.partial(shutil.copytree, mapping.source, target, dirs_exist_ok=True)
        )

        result = MappingResult(mapping, MappingAction.COPY)
        result.written = sorted(
            posixpath.join(mapping.destination, path.relative_to(mapping.source).as_posix())
            for path in mapping.source.rglob("*")
            if path.is_file()
        )
        self.logger.debug(
            "Copied module resources",
            source=str(mapping.source),
            destination=mapping.destination,
            files=result.files_written
        )
        return result

    async def _update_outdated_files(self, mapping: ExportMapping) -> MappingResult:
        result = MappingResult(mapping, MappingAction.UPSERT)

        for entry in sorted(mapping.source.iterdir(), key=lambda p: p.name):
            if not entry.is_file():
                continue

            to = posixpath.join(mapping.destination, entry.name)
            source_bytes = entry.read_bytes()

            is_new_file = not await self.store.file_exists(self.root, to)
            if not is_new_file:
                stored = await self._read_text(to)
                state = self.detector.classify(stored)

                if state == DriftState.MODIFIED:
                    self.logger.debug(
                        "not copying file because it has been changed manually",
                        file=entry.name,
                        destination=to
                    )
                    result.preserved.append(to)
                    continue

                if state == DriftState.UNMODIFIED and self._is_current(stored, source_bytes):
                    result.unchanged.append(to)
                    continue

            self.logger.debug("adding missing file", file=entry.name, destination=to)
            await self.store.upsert_file(self.root, to, source_bytes)
            await self._add_hash_to_file(to)
            result.written.append(to)

        self.logger.info(
            "Synced tracked resources",
            destination=mapping.destination,
            written=result.files_written,
            preserved=result.files_preserved,
            unchanged=result.files_unchanged
        )
        return result

    def _is_current(self, stored: str, source_bytes: bytes) -> bool:
        """Whether an unmodified destination already holds this exact source."""
        digest, _ = self.marker.strip(stored)
        return digest == self.hasher.hash_content(source_bytes)

    async def _read_text(self, path: str) -> str:
        """Destination content as text; bytes that are not UTF-8 are kept, not rejected."""
        return decode_text(await self.store.read_bytes(self.root, path))

    async def _add_hash_to_file(self, path: str) -> None:
        """Re-stamp a just-written file with a marker over its content."""
        content = await self._read_text(path)
        await self.store.upsert_file(self.root, path, encode_text(self.marker.stamp(content)))
