"""Build orchestration.

BuildManager resolves every discovered resource to a content-addressed output
path, compacting on demand. Resolution is lazy and memoized: compactors call
back into :meth:`BuildManager.ensure_processed` for anything they depend on
(manifest children, stylesheet references), so resources resolve depth-first
regardless of discovery order.

Example:
    from mergebuild.core import Settings
    from mergebuild.builder import BuildManager

    settings = Settings(source_dir="webapp", target_dir="build")
    manager = BuildManager(settings)
    count = manager.execute()  # writes build/cdn.properties
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from pathlib import Path
from types import MappingProxyType

from mergebuild.builder.compactors import (
    Compactor,
    CSSCompactor,
    JSCompactor,
    MergeCompactor,
    NullCompactor,
)
from mergebuild.builder.discovery import find_files, get_extension
from mergebuild.builder.placeholders import CSSPlaceholderGenerator, JSPlaceholderGenerator
from mergebuild.builder.properties import write_link_properties, write_properties
from mergebuild.core.config import Settings
from mergebuild.core.errors import CompactionError, MergeBuildError, OutputWriteError
from mergebuild.core.logging import LoggerProtocol, StdlibLoggerAdapter
from mergebuild.core.utils.hashing import ContentHasher


def default_compactors(settings: Settings) -> list[Compactor]:
    """The standard registry: manifests, pass-through extras, CSS and JS."""
    return [
        MergeCompactor(JSPlaceholderGenerator(), CSSPlaceholderGenerator()),
        NullCompactor(*settings.extensions),
        CSSCompactor(),
        JSCompactor(),
    ]


class BuildManager:
    """Owns the lookup tables for one build run.

    Tables:
        hash_lookup: logical path -> hashed output path. A hashed path may
            itself be a key, pointing at its debug placeholder.
        dependency_map: manifest path -> ordered, duplicate-free children.
        child_links: path -> ordered set of resources reachable from it.

    Args:
        settings: Path settings; the source directory must exist.
        compactors: Compactors to register. Later registrations win for a
            shared extension. Defaults to :func:`default_compactors`.
        logger: Logger conforming to LoggerProtocol. If None, uses the
            stdlib logger wrapped with StdlibLoggerAdapter.

    Raises:
        ConfigurationError: If the source directory is unset or missing
    """

    def __init__(
        self,
        settings: Settings,
        compactors: Sequence[Compactor] | None = None,
        logger: LoggerProtocol | None = None,
    ) -> None:
        settings.validate_paths()
        self.settings = settings

        if logger is None:
            self.logger: LoggerProtocol = StdlibLoggerAdapter(logging.getLogger(__name__))
        else:
            self.logger = logger

        if compactors is None:
            compactors = default_compactors(settings)

        registry: dict[str, Compactor] = {}
        for compactor in compactors:
            for ext in compactor.source_extensions:
                registry[ext.lower()] = compactor
        self.compactors: Mapping[str, Compactor] = MappingProxyType(registry)

        self._hash_lookup: dict[str, str] = {}
        self._dependency_map: dict[str, list[str]] = {}
        self._child_links: dict[str, dict[str, None]] = {}
        # insertion-ordered set of paths currently being resolved
        self._in_flight: dict[str, None] = {}

    @property
    def hash_lookup(self) -> Mapping[str, str]:
        return MappingProxyType(self._hash_lookup)

    @property
    def dependency_map(self) -> Mapping[str, list[str]]:
        return MappingProxyType(self._dependency_map)

    @property
    def child_links(self) -> dict[str, list[str]]:
        return {path: list(links) for path, links in self._child_links.items()}

    def execute(self) -> int:
        """
        Compact every discovered resource and write the map files.

        Returns:
            Number of entries written to the CDN map

        Raises:
            OutputWriteError: If either map file cannot be written
        """
        target_dir = self.settings.get_target_dir()
        assert target_dir is not None
        files = find_files(
            [self.settings.source_dir, target_dir],
            self.compactors.keys(),
            exclude_dir=self.settings.get_cdn_dir(),
        )
        self.logger.info(f"Found {len(files)} source files", source=str(self.settings.source_dir))

        for source, path in files.items():
            self._resolve(path, source)

        self.propagate_child_links()
        return self.write_outputs()

    def ensure_processed(self, path: str) -> None:
        """
        Resolve ``path`` unless it already has a compacted output.

        Safe to call re-entrantly from inside a compactor. Failures are
        logged and leave the path unresolved; nothing propagates.

        Args:
            path: Logical path, e.g. "/css/site.css"
        """
        target = self.get_target_file(path)
        if target is not None and target.exists():
            return

        source = self.settings.find_source_file(path)
        if source is None:
            self.logger.warning(f"Path escapes the source root: {path}", path=path)
            return
        if not source.is_file():
            self.logger.debug(f"No source file for {path}", path=path)
            return

        self._resolve(path, source)

    def _resolve(self, path: str, source: Path) -> None:
        try:
            self._process_resource(path, source)
        except (MergeBuildError, OSError, ValueError) as e:
            self.logger.error(f"Failed to process {path}: {e}", path=path, error=str(e))

    @contextmanager
    def _resolving(self, path: str) -> Iterator[None]:
        self._in_flight[path] = None
        try:
            yield
        finally:
            del self._in_flight[path]

    def _process_resource(self, path: str, source: Path) -> None:
        # keep track of in-flight paths to prevent cycles
        if path in self._in_flight:
            chain = " -> ".join([*self._in_flight, path])
            self.logger.error(f"Cyclical dependencies detected in: {path}", path=path, chain=chain)
            return
        if len(self._in_flight) >= self.settings.max_depth:
            self.logger.error(
                f"Nesting deeper than {self.settings.max_depth} levels at: {path}", path=path
            )
            return

        with self._resolving(path):
            source_ext = get_extension(source.name)
            compactor = self.compactors.get(source_ext)
            if compactor is None:
                self.logger.error(f"No compactor registered for {source_ext!r}", path=path)
                return

            if path not in self._hash_lookup:
                digest = ContentHasher.new()
                compactor.calc_hash(self, digest, path, source)
                target_ext = compactor.get_target_extension(self, path)
                self.set_processed_path(
                    path, f"{self.settings.cdn_root}{digest.hexdigest()}{target_ext}"
                )

            target = self.get_target_file(path)
            assert target is not None
            if not target.exists():
                target.parent.mkdir(parents=True, exist_ok=True)
                try:
                    compactor.compact(self, path, source, target)
                except (CompactionError, OSError, ValueError) as e:
                    self.logger.error(f"{path} failed to compact: {e}", path=path)
                    target.unlink(missing_ok=True)
                    self.remove_processed_path(path)
                    return

            if not target.exists():
                self.logger.error(f"{path} failed to compact (output missing)", path=path)
                self.remove_processed_path(path)
                return

            if target.stat().st_size < 1:
                if source.stat().st_size < 1:
                    self.logger.warning(f"{path} is an empty file", path=path)
                    self.remove_processed_path(path)
                    return

                self.logger.warning(
                    f"{path} compacted to an empty file (using original)", path=path
                )
                NullCompactor().compact(self, path, source, target)

            compactor.build_placeholders(self, path)

    def get_processed_path(self, path: str) -> str | None:
        return self._hash_lookup.get(path)

    def set_processed_path(self, path: str, hash_path: str) -> None:
        self._hash_lookup[path] = hash_path

    def remove_processed_path(self, path: str) -> None:
        self._hash_lookup.pop(path, None)

    def get_placeholder_path(self, path: str) -> str:
        """
        Resolve ``path`` through the debug placeholder indirection.

        Follows original -> hashed -> debug. Falls back to ``path`` itself
        when either step is missing, so a leaf resolves to its source path.
        """
        hashed = self._hash_lookup.get(path)
        if not hashed:
            return path

        placeholder = self._hash_lookup.get(hashed)
        if not placeholder:
            return path

        return placeholder

    def get_target_file(self, path: str) -> Path | None:
        """Output file for the hashed path of ``path``, or None if unresolved."""
        hashed = self._hash_lookup.get(path)
        if hashed is None:
            return None
        return self.settings.get_target_file(hashed)

    def add_dependency(self, path: str, child: str) -> None:
        children = self._dependency_map.setdefault(path, [])
        if child not in children:
            children.append(child)

    def get_dependencies(self, path: str) -> list[str]:
        return list(self._dependency_map.get(path, ()))

    def add_child_link(self, path: str, link: str) -> None:
        self._child_links.setdefault(path, {})[link] = None

    def get_child_links(self, path: str) -> list[str]:
        return list(self._child_links.get(path, ()))

    def propagate_child_links(self) -> None:
        """
        Flatten child links transitively.

        Every manifest inherits the child links of its dependencies, and
        every other link owner (stylesheets, debug placeholders) inherits
        the links of the resources it points at, at any depth. Running it
        again changes nothing.
        """
        # repeat until no set grows
        changed = True
        while changed:
            changed = False
            for path, dependencies in self._dependency_map.items():
                for dependency in dependencies:
                    changed |= self._inherit_links(path, dependency)

            for owner in list(self._child_links):
                if owner in self._dependency_map:
                    continue
                for link in list(self._child_links[owner]):
                    changed |= self._inherit_links(owner, link)

    def _inherit_links(self, owner: str, source: str) -> bool:
        """Copy the child links of ``source`` onto ``owner``; True if any were new."""
        inherited = self._child_links.get(source)
        if not inherited or source == owner:
            return False

        links = self._child_links.setdefault(owner, {})
        size = len(links)
        for link in list(inherited):
            if link != owner:
                links[link] = None
        return len(links) != size

    def write_outputs(self) -> int:
        """
        Write the CDN map and the child-link map.

        Returns:
            Number of entries in the CDN map

        Raises:
            OutputWriteError: If a file cannot be written
        """
        map_file = self.settings.get_cdn_map_file()
        try:
            write_properties(map_file, self._hash_lookup)
        except OSError as e:
            raise OutputWriteError(map_file, e) from e

        links_file = self.settings.get_cdn_links_file()
        links = {path: list(values) for path, values in self._child_links.items() if values}
        try:
            write_link_properties(links_file, links)
        except OSError as e:
            raise OutputWriteError(links_file, e) from e

        self.logger.success(
            f"Wrote {len(self._hash_lookup)} entries to {map_file}",
            map_file=str(map_file),
            links_file=str(links_file),
        )
        return len(self._hash_lookup)
