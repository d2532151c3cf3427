"""Core utilities for merge-builder.

This module provides utility classes and functions:
- ContentHasher: Deterministic digests for content-addressed file names
"""

from mergebuild.core.utils.hashing import ContentHasher

__all__ = [
    "ContentHasher",
]
