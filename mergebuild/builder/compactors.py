"""Compactors: per-extension hashing and transformation of source files.

Each compactor claims a set of source extensions and knows how to
contribute to a resource's digest and how to write the compacted target.
The build manager picks the compactor by the source file's extension.

Variants:
- NullCompactor: hashes raw bytes, copies byte-for-byte
- JSCompactor: minifies scripts with rjsmin
- CSSCompactor: rewrites url() references, then minifies with rcssmin
- MergeCompactor: expands a ".merge" manifest into the concatenation of
  its children and registers debug placeholders
"""

from __future__ import annotations

import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any

import rcssmin
import rjsmin

from mergebuild.builder.discovery import get_extension, resolve_path
from mergebuild.builder.links import LinkRewriter
from mergebuild.builder.placeholders import PlaceholderGenerator
from mergebuild.core.constants import (
    CSS_EXTENSION,
    DEBUG_DIR,
    JS_EXTENSION,
    MERGE_EXTENSION,
    SOURCE_ENCODING,
    SOURCE_ERRORS,
)
from mergebuild.core.errors import CompactionError
from mergebuild.core.utils.hashing import ContentHasher

if TYPE_CHECKING:
    from mergebuild.builder.manager import BuildManager


class Compactor(ABC):
    """Contract between the build manager and a source format."""

    @property
    @abstractmethod
    def source_extensions(self) -> tuple[str, ...]:
        """Extensions this compactor consumes, e.g. (".js",)."""

    @abstractmethod
    def get_target_extension(self, manager: BuildManager, path: str) -> str:
        """Extension of the hashed output for ``path``."""

    @abstractmethod
    def calc_hash(self, manager: BuildManager, digest: Any, path: str, source: Path) -> None:
        """Feed everything the output of ``path`` depends on into ``digest``."""

    @abstractmethod
    def compact(self, manager: BuildManager, path: str, source: Path, target: Path) -> None:
        """Write the compacted form of ``source`` to ``target``.

        Raises:
            CompactionError: If the transformation fails
        """

    def build_placeholders(self, manager: BuildManager, path: str) -> None:
        """Register debug stand-ins once ``path`` is resolved. No-op by default."""


class NullCompactor(Compactor):
    """Very basic compactor which copies the bytes from source to target."""

    def __init__(self, *extensions: str) -> None:
        self._extensions = tuple(extensions)

    @property
    def source_extensions(self) -> tuple[str, ...]:
        return self._extensions

    def get_target_extension(self, manager: BuildManager, path: str) -> str:
        return get_extension(path)

    def calc_hash(self, manager: BuildManager, digest: Any, path: str, source: Path) -> None:
        with open(source, "rb") as stream:
            ContentHasher.update_stream(digest, stream)

    def compact(self, manager: BuildManager, path: str, source: Path, target: Path) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)


class JSCompactor(NullCompactor):
    """Script minification via rjsmin."""

    def __init__(self) -> None:
        super().__init__(JS_EXTENSION)

    def get_target_extension(self, manager: BuildManager, path: str) -> str:
        return JS_EXTENSION

    def compact(self, manager: BuildManager, path: str, source: Path, target: Path) -> None:
        # bytes in, bytes out
        script = source.read_bytes()
        try:
            minified = rjsmin.jsmin(script)
        except Exception as e:
            raise CompactionError(path, str(e)) from e

        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(minified)


class CSSCompactor(NullCompactor):
    """Stylesheet minification via rcssmin with link rewriting.

    The digest covers the raw bytes plus the hashed name of every resolved
    ``url()`` reference, so a stylesheet is renamed whenever a resource it
    points at changes.
    """

    def __init__(self) -> None:
        super().__init__(CSS_EXTENSION)

    def get_target_extension(self, manager: BuildManager, path: str) -> str:
        return CSS_EXTENSION

    def calc_hash(self, manager: BuildManager, digest: Any, path: str, source: Path) -> None:
        super().calc_hash(manager, digest, path, source)

        rewriter = LinkRewriter(manager, path)
        css = source.read_text(encoding=SOURCE_ENCODING, errors=SOURCE_ERRORS)
        ContentHasher.update_strings(digest, rewriter.resolve_all(css))

    def compact(self, manager: BuildManager, path: str, source: Path, target: Path) -> None:
        css = source.read_text(encoding=SOURCE_ENCODING, errors=SOURCE_ERRORS)
        css = LinkRewriter(manager, path).rewrite(css)
        try:
            minified = rcssmin.cssmin(css.encode(SOURCE_ENCODING, SOURCE_ERRORS))
        except Exception as e:
            raise CompactionError(path, str(e)) from e

        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(minified)


class MergeCompactor(Compactor):
    """Expands ".merge" manifests.

    A manifest lists one child path per line; blank lines and lines starting
    with "#" are ignored, and relative entries resolve against the manifest's
    own path. Entries climbing above the root are skipped. The manifest's
    digest is computed over its children's hashed output paths, so any
    change to a descendant renames every ancestor.
    """

    def __init__(self, *placeholders: PlaceholderGenerator) -> None:
        self.placeholders: dict[str, PlaceholderGenerator] = {
            placeholder.target_extension: placeholder for placeholder in placeholders
        }

    @property
    def source_extensions(self) -> tuple[str, ...]:
        return (MERGE_EXTENSION,)

    def get_target_extension(self, manager: BuildManager, path: str) -> str:
        # merge file assumes the first non-empty extension
        for dependency in manager.get_dependencies(path):
            ext = get_extension(dependency)
            if ext == MERGE_EXTENSION:
                ext = self.get_target_extension(manager, dependency)
            if ext:
                return ext
        return ""

    def read_manifest(self, manager: BuildManager, path: str, source: Path) -> list[str]:
        """Return the normalized child paths listed in ``source``, in order."""
        children = []
        for line in source.read_text(encoding=SOURCE_ENCODING, errors=SOURCE_ERRORS).splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            child = resolve_path(path, line)
            if child is None:
                manager.logger.warning(f"Merge reference outside the source root: {line}", path=path)
                continue
            children.append(child)
        return children

    def calc_hash(self, manager: BuildManager, digest: Any, path: str, source: Path) -> None:
        seen: set[str] = set()
        for dependency in self.read_manifest(manager, path, source):
            if dependency in seen:
                manager.logger.debug(f"Duplicate merge reference: {dependency}", path=path)
                continue
            seen.add(dependency)

            manager.ensure_processed(dependency)

            hashed = manager.get_processed_path(dependency)
            if not hashed:
                # skip missing resources (will be reflected in hash when they become available)
                manager.logger.warning(f"Missing merge reference: {dependency}", path=path)
                continue

            manager.add_dependency(path, dependency)
            ContentHasher.update_strings(digest, [hashed])

    def compact(self, manager: BuildManager, path: str, source: Path, target: Path) -> None:
        manager.logger.info(f"Building {path}", output=manager.get_processed_path(path))

        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as output:
            for child in manager.get_dependencies(path):
                manager.logger.debug(f"- adding {child}", path=path)
                child_target = manager.get_target_file(child)
                if child_target is None:
                    raise CompactionError(path, f"dependency {child} is no longer resolved")
                with open(child_target, "rb") as stream:
                    shutil.copyfileobj(stream, output)

    def build_placeholders(self, manager: BuildManager, path: str) -> None:
        hash_path = manager.get_processed_path(path)
        dependencies = manager.get_dependencies(path)
        if not hash_path or not dependencies:
            return

        if len(dependencies) == 1:
            # a single child is its own debug placeholder
            manager.set_processed_path(hash_path, manager.get_placeholder_path(dependencies[0]))
            return

        target_ext = get_extension(hash_path)
        generator = self.placeholders.get(target_ext)
        if generator is None:
            manager.logger.warning(f"No debug placeholder generator found for {target_ext!r}", path=path)
            return

        slash = hash_path.rfind("/")
        debug_path = f"{hash_path[:slash]}/{DEBUG_DIR}{hash_path[slash:]}"
        manager.set_processed_path(hash_path, debug_path)

        for dependency in dependencies:
            # in debug placeholders, merge dependencies become child links
            manager.add_child_link(debug_path, dependency)

        target = manager.settings.get_target_file(debug_path)
        if not target.exists():
            generator.build(manager, target, dependencies)
