"""Persisted key/value tables.

The CDN map and the link map are written as flat ``key=value`` lines that a
simple line-oriented properties reader can load. Reserved characters are
backslash-escaped in both keys and values.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path

LINK_SEPARATOR = "|"

_ESCAPES = {
    "\\": "\\\\",
    ":": "\\:",
    "=": "\\=",
    "#": "\\#",
    "!": "\\!",
    " ": "\\ ",
    "\t": "\\t",
    "\n": "\\n",
    "\r": "\\r",
}
_UNESCAPES = {"t": "\t", "n": "\n", "r": "\r"}


def escape_property(text: str | None) -> str:
    """Backslash-escape reserved characters; None becomes ""."""
    if not text:
        return ""
    if not any(ch in _ESCAPES for ch in text):
        return text
    return "".join(_ESCAPES.get(ch, ch) for ch in text)


def unescape_property(text: str) -> str:
    """Reverse :func:`escape_property`."""
    if "\\" not in text:
        return text

    chars: list[str] = []
    escaped = False
    for ch in text:
        if escaped:
            chars.append(_UNESCAPES.get(ch, ch))
            escaped = False
        elif ch == "\\":
            escaped = True
        else:
            chars.append(ch)
    return "".join(chars)


def format_properties(entries: Mapping[str, str]) -> str:
    """Render entries as escaped ``key=value`` lines in insertion order."""
    return "".join(
        f"{escape_property(key)}={escape_property(value)}\n" for key, value in entries.items()
    )


def format_link_properties(links: Mapping[str, Iterable[str]]) -> str:
    """Render link sets as ``key=link|link`` lines, each link escaped."""
    lines = []
    for key, values in links.items():
        joined = LINK_SEPARATOR.join(escape_property(value) for value in values)
        lines.append(f"{escape_property(key)}={joined}\n")
    return "".join(lines)


def write_properties(path: Path, entries: Mapping[str, str]) -> None:
    """Rewrite ``path`` with the given entries. OSError propagates."""
    _write(path, format_properties(entries))


def write_link_properties(path: Path, links: Mapping[str, Iterable[str]]) -> None:
    """Rewrite ``path`` with the given link sets. OSError propagates."""
    _write(path, format_link_properties(links))


def split_property_line(line: str) -> tuple[str, str]:
    """Split a line on its first unescaped ``=`` and unescape both halves.

    Raises:
        ValueError: If the line has no unescaped separator
    """
    key, value = _split_raw(line)
    return unescape_property(key), unescape_property(value)


def read_properties(path: Path) -> dict[str, str]:
    """Load a table written by :func:`write_properties`."""
    entries: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").split("\n"):
        if not line or line.startswith("#"):
            continue
        key, value = split_property_line(line)
        entries[key] = value
    return entries


def read_link_properties(path: Path) -> dict[str, list[str]]:
    """Load a table written by :func:`write_link_properties`."""
    links: dict[str, list[str]] = {}
    for line in path.read_text(encoding="utf-8").split("\n"):
        if not line or line.startswith("#"):
            continue
        key, raw = _split_raw(line)
        links[unescape_property(key)] = [
            unescape_property(value) for value in raw.split(LINK_SEPARATOR) if value
        ]
    return links


def _split_raw(line: str) -> tuple[str, str]:
    escaped = False
    for index, ch in enumerate(line):
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == "=":
            return line[:index], line[index + 1 :]
    raise ValueError(f"Missing '=' in property line: {line!r}")


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="\n") as handle:
        handle.write(content)
