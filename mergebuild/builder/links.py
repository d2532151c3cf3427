"""Stylesheet link rewriting.

Rewrites ``url(...)`` references so they point at the hashed output of the
referenced resource, relative to the stylesheet's own output directory.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from mergebuild.builder.discovery import resolve_path

if TYPE_CHECKING:
    from mergebuild.builder.manager import BuildManager

_URL_PATTERN = re.compile(
    r"""(?<![\w-])url\(\s*(?P<quote>['"]?)(?P<value>.*?)(?P=quote)\s*\)""",
    re.IGNORECASE | re.DOTALL,
)


class LinkRewriter:
    """Filter applied to stylesheet text while it is being compacted.

    Each referenced resource is resolved through the build manager, which
    compacts it on demand, and is recorded as a child link of the
    stylesheet. References that cannot be resolved are left as written.

    Args:
        manager: Build manager owning the lookup tables
        path: Logical path of the stylesheet being compacted
    """

    def __init__(self, manager: BuildManager, path: str) -> None:
        self.manager = manager
        self.path = path

    def rewrite(self, css: str) -> str:
        """Return ``css`` with every resolvable ``url(...)`` rewritten."""
        return _URL_PATTERN.sub(self._replace, css)

    def resolve_all(self, css: str) -> list[str]:
        """Hashed file names of every resolvable reference, in document order."""
        resolved = []
        for match in _URL_PATTERN.finditer(css):
            rewritten = self.resolve(match.group("value").strip(), verbose=False)
            if rewritten is not None:
                resolved.append(rewritten)
        return resolved

    def _replace(self, match: re.Match[str]) -> str:
        quote = match.group("quote")
        value = match.group("value").strip()

        rewritten = self.resolve(value)
        if rewritten is None:
            return match.group(0)

        if quote:
            rewritten = rewritten.replace(quote, "\\" + quote)
        return f"url({quote}{rewritten}{quote})"

    def resolve(self, value: str, verbose: bool = True) -> str | None:
        """
        Map one reference to its hashed file name.

        Args:
            value: The literal reference, e.g. "../img/logo.png?v=2"
            verbose: Log the rewrite or the missing reference

        Returns:
            The hashed file name with the original query/fragment suffix,
            or None when the reference is left unchanged
        """
        if not value or value.lower().startswith("data:") or value.startswith("#"):
            return None

        parts = urlsplit(value)
        if parts.scheme or parts.netloc:
            # external resource
            return None
        if not parts.path:
            return None

        target = resolve_path(self.path, parts.path)
        if target is None:
            if verbose:
                self.manager.logger.warning(
                    f"CSS reference outside the source root: {value}", path=self.path
                )
            return None

        suffix = ""
        if parts.query:
            suffix += "?" + parts.query
        if parts.fragment:
            suffix += "#" + parts.fragment

        self.manager.add_child_link(self.path, target)
        self.manager.ensure_processed(target)

        hashed = self.manager.get_processed_path(target)
        if not hashed:
            if verbose:
                self.manager.logger.warning(f"Missing CSS reference: {target}", path=self.path)
            return None

        # keep only the file name so the link stays relative to the stylesheet
        filename = hashed[hashed.rfind("/") + 1 :] + suffix
        if verbose:
            self.manager.logger.info(f"CSS url: {target}{suffix} => {filename}", path=self.path)
        return filename
