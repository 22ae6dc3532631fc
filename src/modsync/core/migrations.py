"""Declarative migration scripts that delete obsolete files from the destination."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

from pydantic import ValidationError

from .errors import MigrationError, MigrationParseError
from ..config.schema import MigrationInstruction
from ..stores.base import DestinationStore, DEFAULT_ROOT
from ..utils.logging import get_logger


MIGRATIONS_FILE = "migrations.json"


@dataclass
class MigrationResult:
    """Result of running one migration descriptor."""

    migration_file: str
    found: bool = False
    deleted: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    instructions_skipped: int = 0

    @property
    def files_deleted(self) -> int:
        return len(self.deleted)


def parse_migration_descriptor(content: str) -> Tuple[List[MigrationInstruction], int]:
    """Parse a migrations.json document.

    Entries that are not objects, or whose ``filesToDelete`` is missing or not
    a list, are skipped rather than rejected.

    Returns:
        The valid instructions in order, and how many entries were skipped

    Raises:
        ValueError: If the document is not JSON, is blank, null or another
            falsy scalar, is not a list, or lists a path that is not a string
    """
    data: Any = json.loads(content)
    if not data and not isinstance(data, list):
        raise ValueError("Expected a valid JSON object.")
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of migration instructions, got {type(data).__name__}")

    instructions = []
    skipped = 0
    for entry in data:
        if not isinstance(entry, dict) or not isinstance(entry.get("filesToDelete"), list):
            skipped += 1
            continue
        instructions.append(MigrationInstruction.model_validate(entry))

    return instructions, skipped


class MigrationRunner:
    """Applies a module's migration descriptor against the destination store.

    There is no ledger of applied migrations: each module load re-runs the
    same descriptor, and deleting an already absent file is a no-op.
    """

    def __init__(self, store: DestinationStore, module_name: str, root: str = DEFAULT_ROOT):
        self.store = store
        self.module_name = module_name
        self.root = root
        self.logger = get_logger(self.__class__.__name__)

    async def run(self, migration_file: Union[str, Path]) -> MigrationResult:
        """Run the descriptor at ``migration_file``; a missing file is a no-op.

        Raises:
            MigrationParseError: If the descriptor is malformed or empty
            MigrationError: If deleting a file fails. Instructions after the
                failing one are not applied.
        """
        migration_file = Path(migration_file)
        result = MigrationResult(migration_file=str(migration_file))

        if not migration_file.is_file():
            self.logger.debug("No migration script found", migration_file=str(migration_file))
            return result

        result.found = True
        instructions = self._load(migration_file, result)

        try:
            for instruction in instructions:
                for file_to_delete in instruction.files_to_delete:
                    await self._delete(file_to_delete, result)
        except Exception as e:
            raise MigrationError(str(migration_file), self.module_name, e) from e

        self.logger.info(
            "Migration script applied",
            module=self.module_name,
            migration_file=str(migration_file),
            deleted=result.files_deleted,
            missing=len(result.missing),
            instructions_skipped=result.instructions_skipped
        )
        return result

    def _load(self, migration_file: Path, result: MigrationResult) -> List[MigrationInstruction]:
        try:
            content = migration_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise MigrationError(str(migration_file), self.module_name, e) from e

        try:
            instructions, skipped = parse_migration_descriptor(content)
        except (ValueError, ValidationError) as e:
            raise MigrationParseError(str(migration_file), self.module_name, e) from e

        result.instructions_skipped = skipped
        return instructions

    async def _delete(self, file_to_delete: str, result: MigrationResult) -> None:
        if await self.store.file_exists(self.root, file_to_delete):
            self.logger.debug("migration deleted file", file=file_to_delete)
            await self.store.delete_file(self.root, file_to_delete)
            result.deleted.append(file_to_delete)
        else:
            self.logger.debug("not deleting file, reason: not found", file=file_to_delete)
            result.missing.append(file_to_delete)


def find_migration_file(module_path: Union[str, Path]) -> Optional[Path]:
    """Return the module's migrations.json if it has one."""
    candidate = Path(module_path) / MIGRATIONS_FILE
    return candidate if candidate.is_file() else None
