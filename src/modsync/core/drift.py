"""Drift detection for files previously written by the sync engine."""

from enum import Enum
from typing import Optional

from .checksum import ChecksumMarker
from .hashing import ContentHasher


class DriftState(str, Enum):
    """Classification of a destination file against its checksum marker."""
    UNMODIFIED = "unmodified"  # marker matches content
    MODIFIED = "modified"  # edited by hand since the last sync
    UNTRACKED = "untracked"  # no marker


class DriftDetector:
    """Classifies stored content by recomputing its embedded checksum."""

    def __init__(
        self,
        marker: Optional[ChecksumMarker] = None,
        hasher: Optional[ContentHasher] = None
    ):
        self.hasher = hasher or ContentHasher()
        self.marker = marker or ChecksumMarker(hasher=self.hasher)

    def classify(self, stored_content: str) -> DriftState:
        """Compare the marker digest with a digest of the rest of the file."""
        digest, remainder = self.marker.strip(stored_content)

        if digest is None:
            return DriftState.UNTRACKED

        if self.hasher.hash_content(remainder) != digest:
            return DriftState.MODIFIED

        return DriftState.UNMODIFIED

    def is_modified(self, stored_content: str) -> bool:
        """Whether the file must be treated as modified.

        Untracked files count as modified, matching the overwrite policy
        callers apply to anything that is not provably unmodified.
        """
        return self.classify(stored_content) != DriftState.UNMODIFIED
