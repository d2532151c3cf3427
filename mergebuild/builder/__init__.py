"""Asset build engine.

This module provides:
- BuildManager: Lazy, memoized, cycle-safe resolution of resources to hashed outputs
- Compactor variants: NullCompactor, JSCompactor, CSSCompactor, MergeCompactor
- PlaceholderGenerator variants: JSPlaceholderGenerator, CSSPlaceholderGenerator
- LinkRewriter: url() rewriting for stylesheets
- find_files, get_extension: Source discovery
- Properties helpers for the persisted map files
"""

from mergebuild.builder.compactors import (
    Compactor,
    CSSCompactor,
    JSCompactor,
    MergeCompactor,
    NullCompactor,
)
from mergebuild.builder.discovery import find_files, get_extension, resolve_path
from mergebuild.builder.links import LinkRewriter
from mergebuild.builder.manager import BuildManager, default_compactors
from mergebuild.builder.placeholders import (
    CSSPlaceholderGenerator,
    JSPlaceholderGenerator,
    PlaceholderGenerator,
)
from mergebuild.builder.properties import (
    escape_property,
    read_link_properties,
    read_properties,
    unescape_property,
    write_link_properties,
    write_properties,
)

__all__ = [
    "BuildManager",
    "default_compactors",
    "Compactor",
    "NullCompactor",
    "JSCompactor",
    "CSSCompactor",
    "MergeCompactor",
    "PlaceholderGenerator",
    "JSPlaceholderGenerator",
    "CSSPlaceholderGenerator",
    "LinkRewriter",
    "find_files",
    "get_extension",
    "resolve_path",
    "escape_property",
    "unescape_property",
    "write_properties",
    "write_link_properties",
    "read_properties",
    "read_link_properties",
]
