"""Tests for source discovery."""

from pathlib import Path

import pytest

from mergebuild.builder.discovery import find_files, get_extension, resolve_path


@pytest.mark.parametrize(
    ("path", "ext"),
    [
        ("/js/app.js", ".js"),
        ("/css/Site.CSS", ".css"),
        ("/js/app.min.js", ".js"),
        ("/v1.2/README", ""),
        ("noext", ""),
    ],
)
def test_get_extension(path: str, ext: str) -> None:
    assert get_extension(path) == ext


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("x", encoding="utf-8")
    return path


def test_find_files_filters_and_orders(tmp_path: Path) -> None:
    root = tmp_path / "webapp"
    _touch(root / "b.js")
    _touch(root / "a.css")
    _touch(root / "notes.txt")
    _touch(root / "js" / "z.merge")
    _touch(root / "js" / "lib" / "y.js")

    files = find_files([root], {".js", ".css", ".merge"})

    assert list(files.values()) == ["/a.css", "/b.js", "/js/z.merge", "/js/lib/y.js"]
    assert all(path.is_absolute() for path in files)


def test_find_files_skips_excluded_dir(tmp_path: Path) -> None:
    root = tmp_path / "webapp"
    _touch(root / "app.js")
    _touch(root / "cdn" / "0123abcd.js")
    _touch(root / "cdn" / "debug" / "4567.js")

    files = find_files([root], {".js"}, exclude_dir=root / "cdn")

    assert list(files.values()) == ["/app.js"]


def test_find_files_visits_duplicate_roots_once(tmp_path: Path) -> None:
    root = tmp_path / "webapp"
    _touch(root / "app.js")

    files = find_files([root, root], {".js"})

    assert list(files.values()) == ["/app.js"]


def test_find_files_merges_roots_in_order(tmp_path: Path) -> None:
    source = tmp_path / "src"
    output = tmp_path / "out"
    _touch(source / "a.js")
    _touch(output / "generated.js")

    files = find_files([source, output, tmp_path / "missing"], {".js"})

    assert list(files.values()) == ["/a.js", "/generated.js"]


@pytest.mark.parametrize(
    ("reference", "expected"),
    [
        ("a.js", "/js/a.js"),
        ("./lib/b.js", "/js/lib/b.js"),
        ("../css/c.css", "/css/c.css"),
        ("/js/../js/a.js", "/js/a.js"),
        ("/js//./a.js", "/js/a.js"),
        ("../../outside.js", None),
        ("/../outside.js", None),
    ],
)
def test_resolve_path(reference: str, expected: str | None) -> None:
    assert resolve_path("/js/app.merge", reference) == expected
