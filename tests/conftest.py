"""Shared pytest fixtures."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path

import pytest

from mergebuild.builder import BuildManager
from mergebuild.core import Settings, StdlibLoggerAdapter


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep MERGEBUILD_* variables and stray .env files out of the tests."""
    for name in list(os.environ):
        if name.startswith("MERGEBUILD_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def webapp(tmp_path: Path) -> Path:
    root = tmp_path / "webapp"
    root.mkdir()
    return root


@pytest.fixture
def write_file(webapp: Path) -> Callable[[str, str], Path]:
    """Write a text file under the webapp root given its logical path."""

    def _write(path: str, content: str) -> Path:
        target = webapp / path.lstrip("/")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return target

    return _write


@pytest.fixture
def make_manager(webapp: Path, tmp_path: Path) -> Callable[..., BuildManager]:
    """Build a manager writing into ``tmp_path/out``."""

    def _make(**overrides: object) -> BuildManager:
        options: dict[str, object] = {
            "source_dir": webapp,
            "target_dir": tmp_path / "out",
        }
        options.update(overrides)
        settings = Settings(**options)
        return BuildManager(settings, logger=StdlibLoggerAdapter(logging.getLogger("mergebuild.tests")))

    return _make
