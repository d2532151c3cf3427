"""Hashing utilities for content-addressed output names.

Digests are used only to bust caches, never for security. SHA-1 keeps the
generated names compatible with maps produced by earlier builds.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from pathlib import Path
from typing import IO, Any

from mergebuild.core.constants import BUFFER_SIZE, SOURCE_ENCODING, SOURCE_ERRORS

HASH_ALGORITHM = "sha1"


class ContentHasher:
    """Utility class for computing deterministic content digests.

    A digest context is created with :meth:`new` and fed either raw bytes
    (leaf resources) or an ordered sequence of strings (manifests, which
    hash the hashed output paths of their children). Order matters: the
    same strings in a different order produce a different digest.

    Example:
        >>> digest = ContentHasher.new()
        >>> ContentHasher.update_strings(digest, ["/cdn/a.js", "/cdn/b.js"])
        >>> digest.hexdigest()  # 40 lowercase hex characters
    """

    @staticmethod
    def new() -> Any:
        """Create a fresh digest context."""
        return hashlib.new(HASH_ALGORITHM)

    @staticmethod
    def update_stream(digest: Any, stream: IO[bytes]) -> None:
        """Feed a binary stream into the digest in fixed-size chunks.

        Args:
            digest: Context returned by :meth:`new`
            stream: Binary file object; read until exhausted. I/O errors
                propagate to the caller.
        """
        while True:
            chunk = stream.read(BUFFER_SIZE)
            if not chunk:
                break
            digest.update(chunk)

    @staticmethod
    def update_strings(digest: Any, values: Iterable[str]) -> None:
        """Feed each string's UTF-8 bytes into the digest, in order.

        Undecodable source bytes carried as surrogate escapes hash as the
        original bytes.
        """
        for value in values:
            digest.update(value.encode(SOURCE_ENCODING, SOURCE_ERRORS))

    @staticmethod
    def hash_file(path: Path) -> str:
        """Compute the hex digest of a file's raw bytes.

        Example:
            >>> ContentHasher.hash_file(Path("empty.txt"))
            'da39a3ee5e6b4b0d3255bfef95601890afd80709'
        """
        digest = ContentHasher.new()
        with open(path, "rb") as stream:
            ContentHasher.update_stream(digest, stream)
        return digest.hexdigest()

    @staticmethod
    def hash_strings(values: Iterable[str]) -> str:
        """Compute the hex digest over the concatenated UTF-8 strings."""
        digest = ContentHasher.new()
        ContentHasher.update_strings(digest, values)
        return digest.hexdigest()
