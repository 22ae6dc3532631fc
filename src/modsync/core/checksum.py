"""Checksum marker line embedded at the top of tracked files."""

import os
from typing import Optional, Tuple

from .hashing import ContentHasher


CHECKSUM_PREFIX = "//CHECKSUM:"


class ChecksumMarker:
    """Encodes a digest as the first line of a file's content.

    A stamped file looks like ``//CHECKSUM:<digest><linesep><content>``, where
    the digest was computed over ``<content>`` when the file was last written
    by the sync engine.
    """

    def __init__(
        self,
        prefix: str = CHECKSUM_PREFIX,
        line_separator: str = os.linesep,
        hasher: Optional[ContentHasher] = None
    ):
        self.prefix = prefix
        self.line_separator = line_separator
        self.hasher = hasher or ContentHasher()

    def strip(self, content: str) -> Tuple[Optional[str], str]:
        """Split ``content`` into its marker digest and the remaining content.

        Returns ``(None, content)`` unchanged when the first line is not a marker.
        """
        lines = content.split(self.line_separator)
        first_line = lines[0]

        if not first_line.startswith(self.prefix):
            return None, content

        digest = first_line[len(self.prefix):]
        return digest, self.line_separator.join(lines[1:])

    def attach(self, digest: str, content: str) -> str:
        """Prepend a marker line carrying ``digest`` to ``content``."""
        return f"{self.prefix}{digest}{self.line_separator}{content}"

    def stamp(self, content: str) -> str:
        """Attach a marker computed over ``content`` itself."""
        return self.attach(self.hasher.hash_content(content), content)
