"""Debug placeholder generators.

A placeholder stands in for a merged bundle in debug builds: instead of the
concatenated output it loads each child resource individually, so the
original files can be inspected in the browser.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

from mergebuild.core.constants import CSS_EXTENSION, JS_EXTENSION

if TYPE_CHECKING:
    from mergebuild.builder.manager import BuildManager


def nocache_suffix(target: Path) -> str:
    """Query suffix derived from the placeholder's own file name."""
    name = target.name
    dot = name.rfind(".")
    if dot > 0:
        name = name[:dot]
    return "?" + name


class PlaceholderGenerator(ABC):
    """Writes a debug stub that loads an ordered list of children."""

    target_extension: str = ""

    @abstractmethod
    def build(self, manager: BuildManager, target: Path, children: list[str]) -> None:
        """Write the stub for ``children`` (logical paths, in manifest order) to ``target``."""

    def _write(self, target: Path, content: str) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")


class JSPlaceholderGenerator(PlaceholderGenerator):
    """Script stub that writes one ``<script>`` tag per child.

    ``document.write`` keeps the synchronous semantics of the merged
    bundle; when it is unavailable the fallback inserts script elements
    before the first script on the page.
    """

    target_extension = JS_EXTENSION

    def build(self, manager: BuildManager, target: Path, children: list[str]) -> None:
        nocache = nocache_suffix(target)
        sources = [
            manager.get_placeholder_path(child).replace("'", "\\'") + nocache
            for child in children
        ]

        lines = [
            "(function() {",
            "\t// simulate semantics of merged scripts but allow debugging the original files; append anti-caching suffix",
            "\ttry {",
        ]
        for src in sources:
            lines.append(
                "\t\tdocument.write('\\u003cscript type=\"text/javascript\" src=\""
                + src
                + "\">\\u003c/script>');"
            )
        lines.append("\t} catch(ex) {")
        lines.append("\t\tvar s, d=document, f=d.getElementsByTagName('script')[0], p=f.parentNode;")
        for src in sources:
            lines.append(
                "\t\ts=d.createElement('script');s.type='text/javascript';s.src='"
                + src
                + "';p.insertBefore(s,f);"
            )
        lines.append("\t}")
        lines.append("})();")

        self._write(target, "\n".join(lines))


class CSSPlaceholderGenerator(PlaceholderGenerator):
    """Stylesheet stub with one ``@import`` per child."""

    target_extension = CSS_EXTENSION

    def build(self, manager: BuildManager, target: Path, children: list[str]) -> None:
        nocache = nocache_suffix(target)
        lines = [
            "/* simulate semantics of merged stylesheets but allow debugging of original files; append anti-caching suffix */"
        ]
        for child in children:
            lines.append(f"@import url({manager.get_placeholder_path(child)}{nocache});")

        self._write(target, "\n".join(lines) + "\n")
