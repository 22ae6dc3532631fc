"""Content hashing used for checksum markers."""

import hashlib
from typing import Union


# Undecodable bytes survive a decode/encode round trip as lone surrogates
TEXT_ERRORS = "surrogateescape"


def decode_text(content: bytes) -> str:
    """Decode file content as UTF-8 without ever failing."""
    return content.decode("utf-8", TEXT_ERRORS)


def encode_text(content: str) -> bytes:
    """Inverse of :func:`decode_text`."""
    return content.encode("utf-8", TEXT_ERRORS)


class ContentHasher:
    """Deterministic SHA-256 digest of file content."""

    algorithm = "sha256"

    def hash_content(self, content: Union[bytes, str]) -> str:
        """Return the hex digest of ``content``.

        Text is hashed as UTF-8; text produced by :func:`decode_text` hashes
        to the digest of the original bytes.
        """
        if isinstance(content, str):
            content = encode_text(content)
        elif not isinstance(content, (bytes, bytearray, memoryview)):
            raise TypeError(f"Cannot hash content of type {type(content).__name__}")
        return hashlib.new(self.algorithm, content).hexdigest()
