"""Source file discovery."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


def get_extension(path: str) -> str:
    """Return the lowercase extension of the last path segment, or ""."""
    name = path.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    if dot < 0:
        return ""
    return name[dot:].lower()


def resolve_path(base: str, reference: str) -> str | None:
    """
    Resolve a reference against the logical path of the file containing it.

    Absolute references have their dot segments collapsed as well, so one
    file always maps to one logical path.

    Args:
        base: Logical path of the referring file, e.g. "/js/app.merge"
        reference: Path as written, e.g. "../lib/a.js" or "/js/./b.js"

    Returns:
        The normalized logical path, or None if it climbs above the root
    """
    if reference.startswith("/"):
        segments = reference.split("/")
    else:
        segments = base.split("/")[:-1] + reference.split("/")

    resolved: list[str] = []
    for segment in segments:
        if segment == "..":
            if not resolved:
                return None
            resolved.pop()
        elif segment and segment != ".":
            resolved.append(segment)
    return "/" + "/".join(resolved)


def find_files(
    roots: Iterable[Path],
    extensions: Iterable[str],
    exclude_dir: Path | None = None,
) -> dict[Path, str]:
    """Walk each root and collect files with a recognized extension.

    Directory entries are visited in sorted order so the result is stable
    between runs. Anything under ``exclude_dir`` (the hashed output) is
    skipped, which matters when the output root overlaps the source root.

    Args:
        roots: Directories to walk; duplicates are visited once.
        extensions: Recognized extensions, e.g. {".js", ".merge"}.
        exclude_dir: Directory whose contents are never returned.

    Returns:
        Ordered mapping of absolute file to logical path ("/js/app.js").
        When the same absolute file is reachable from two roots the first
        root's logical path wins.
    """
    recognized = set(extensions)
    excluded = exclude_dir.resolve() if exclude_dir is not None else None
    files: dict[Path, str] = {}

    seen_roots: set[Path] = set()
    for root in roots:
        root = root.resolve()
        if root in seen_roots or not root.is_dir():
            continue
        seen_roots.add(root)

        pending = [root]
        while pending:
            folder = pending.pop(0)
            if excluded is not None and folder.is_relative_to(excluded):
                continue

            for entry in sorted(folder.iterdir()):
                if entry.is_dir():
                    pending.append(entry)
                    continue

                if get_extension(entry.name) not in recognized:
                    continue
                if entry in files:
                    continue
                files[entry] = "/" + entry.relative_to(root).as_posix()

    return files
