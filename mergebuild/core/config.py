"""Configuration management using Pydantic Settings."""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from mergebuild.core.constants import (
    DEFAULT_CDN_ROOT,
    DEFAULT_LINKS_FILE,
    DEFAULT_MAP_FILE,
    MAX_DEPTH,
)

_EXTENSION_SPLIT = re.compile(r"[|,\s]+")


class Settings(BaseSettings):
    """Build settings loaded from environment variables with MERGEBUILD_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="MERGEBUILD_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Locations
    source_dir: Path | None = None
    target_dir: Path | None = None
    cdn_map_file: Path | None = None
    cdn_links_file: Path | None = None

    # URL root of the hashed output, always "/.../"
    cdn_root: str = DEFAULT_CDN_ROOT

    # Extra extensions copied through without transformation
    extensions: Annotated[list[str], NoDecode] = Field(default_factory=list)

    # Processing
    max_depth: int = Field(default=MAX_DEPTH, ge=1, le=1024)

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    @field_validator("source_dir", "target_dir", "cdn_map_file", "cdn_links_file", mode="before")
    @classmethod
    def normalize_path(cls, v: Any) -> Any:
        """Treat empty strings as unset and convert backslashes to slashes."""
        if v is None or v == "":
            return None
        if isinstance(v, str):
            return Path(v.replace("\\", "/"))
        return v

    @field_validator("cdn_root", mode="before")
    @classmethod
    def normalize_cdn_root(cls, v: Any) -> str:
        """
        Normalize the CDN root to a slash-delimited URL path.

        Args:
            v: The raw CDN root

        Returns:
            The root with a leading and trailing slash, or the default
            when empty
        """
        if not v:
            return DEFAULT_CDN_ROOT

        value = str(v).replace("\\", "/")
        if not value.startswith("/"):
            value = "/" + value
        if not value.endswith("/"):
            value += "/"
        return value

    @field_validator("extensions", mode="before")
    @classmethod
    def parse_extensions(cls, v: Any) -> list[str]:
        """
        Parse extra extensions from a delimited string or a list.

        Args:
            v: Either "png|gif, ico" style text or an iterable of extensions

        Returns:
            Lowercase extensions, each with a leading dot
        """
        if v is None:
            return []
        if isinstance(v, str):
            items = _EXTENSION_SPLIT.split(v)
        else:
            items = []
            for item in v:
                items.extend(_EXTENSION_SPLIT.split(str(item)))

        result: list[str] = []
        for item in items:
            item = item.strip().lower()
            if not item:
                continue
            if not item.startswith("."):
                item = "." + item
            if item not in result:
                result.append(item)
        return result

    def get_target_dir(self) -> Path | None:
        """Output root; falls back to the source root."""
        return self.target_dir if self.target_dir is not None else self.source_dir

    def get_cdn_dir(self) -> Path:
        """Directory holding hashed output, excluded from discovery."""
        return self._require_target_dir() / self.cdn_root.strip("/")

    def get_cdn_map_file(self) -> Path:
        if self.cdn_map_file is None:
            return self._require_target_dir() / DEFAULT_MAP_FILE
        return self.cdn_map_file

    def get_cdn_links_file(self) -> Path:
        if self.cdn_links_file is None:
            return self._require_target_dir() / DEFAULT_LINKS_FILE
        return self.cdn_links_file

    def get_target_file(self, target_path: str) -> Path:
        """Map a slash-rooted URL path onto the output root."""
        return self._require_target_dir() / target_path.lstrip("/")

    def find_source_file(self, path: str) -> Path | None:
        """
        Locate the file backing a logical path.

        A copy under the output root takes precedence over the source root.

        Args:
            path: Logical path, e.g. "/js/app.js"

        Returns:
            The output-root file if it exists, otherwise the source-root file
            (which may not exist either). None when the path climbs above
            the roots with ".." segments.
        """
        relative = PurePosixPath(path.lstrip("/"))
        if ".." in relative.parts:
            return None

        candidate = self._require_target_dir() / relative
        if candidate.is_file():
            return candidate

        assert self.source_dir is not None, "source_dir must be validated first"
        return self.source_dir / relative

    def validate_paths(self) -> None:
        """
        Check that a build can start.

        Raises:
            ConfigurationError: If the source directory is unset or missing
        """
        from mergebuild.core.errors import ConfigurationError

        if self.source_dir is None:
            raise ConfigurationError("Missing source directory")
        if not self.source_dir.is_dir():
            raise ConfigurationError(f"Missing source directory {self.source_dir}")

    def _require_target_dir(self) -> Path:
        target = self.get_target_dir()
        if target is None:
            from mergebuild.core.errors import ConfigurationError

            raise ConfigurationError("Missing source directory")
        return target
