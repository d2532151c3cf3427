"""Tests for build settings."""

from pathlib import Path

import pytest

from mergebuild.core import ConfigurationError, Settings


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("", "/cdn/"),
        ("cdn", "/cdn/"),
        ("/static/cdn", "/static/cdn/"),
        ("\\assets\\cdn\\", "/assets/cdn/"),
    ],
)
def test_cdn_root_is_normalized(raw: str, expected: str) -> None:
    assert Settings(cdn_root=raw).cdn_root == expected


def test_extensions_accept_delimited_text() -> None:
    settings = Settings(extensions="png|GIF, .ico  svg")
    assert settings.extensions == [".png", ".gif", ".ico", ".svg"]


def test_extensions_accept_lists() -> None:
    settings = Settings(extensions=["png,gif", ".png", "woff2"])
    assert settings.extensions == [".png", ".gif", ".woff2"]


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("MERGEBUILD_SOURCE_DIR", str(tmp_path))
    monkeypatch.setenv("MERGEBUILD_EXTENSIONS", "png|jpg")
    monkeypatch.setenv("MERGEBUILD_CDN_ROOT", "static")

    settings = Settings()

    assert settings.source_dir == tmp_path
    assert settings.extensions == [".png", ".jpg"]
    assert settings.cdn_root == "/static/"


def test_output_defaults_follow_source(tmp_path: Path) -> None:
    settings = Settings(source_dir=tmp_path)

    assert settings.get_target_dir() == tmp_path
    assert settings.get_cdn_dir() == tmp_path / "cdn"
    assert settings.get_cdn_map_file() == tmp_path / "cdn.properties"
    assert settings.get_cdn_links_file() == tmp_path / "cdn-links.properties"


def test_explicit_output_locations(tmp_path: Path) -> None:
    settings = Settings(
        source_dir=tmp_path / "src",
        target_dir=tmp_path / "out",
        cdn_map_file=tmp_path / "maps" / "cdn.properties",
        cdn_root="/static/cdn/",
    )

    assert settings.get_cdn_dir() == tmp_path / "out" / "static" / "cdn"
    assert settings.get_cdn_map_file() == tmp_path / "maps" / "cdn.properties"
    assert settings.get_target_file("/static/cdn/abc.js") == tmp_path / "out" / "static" / "cdn" / "abc.js"


def test_find_source_file_prefers_output_copy(tmp_path: Path) -> None:
    source = tmp_path / "src"
    output = tmp_path / "out"
    (source / "js").mkdir(parents=True)
    (output / "js").mkdir(parents=True)
    (source / "js" / "a.js").write_text("source", encoding="utf-8")
    (source / "js" / "b.js").write_text("source", encoding="utf-8")
    (output / "js" / "a.js").write_text("output", encoding="utf-8")

    settings = Settings(source_dir=source, target_dir=output)

    assert settings.find_source_file("/js/a.js") == output / "js" / "a.js"
    assert settings.find_source_file("/js/b.js") == source / "js" / "b.js"


def test_validate_paths(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Missing source directory"):
        Settings().validate_paths()
    with pytest.raises(ConfigurationError):
        Settings(source_dir=tmp_path / "nope").validate_paths()

    Settings(source_dir=tmp_path).validate_paths()


def test_max_depth_is_bounded() -> None:
    with pytest.raises(ValueError):
        Settings(max_depth=0)


def test_find_source_file_rejects_paths_above_root(tmp_path: Path) -> None:
    source = tmp_path / "src"
    source.mkdir()
    (tmp_path / "outside.js").write_text("var secret = 1;\n", encoding="utf-8")

    settings = Settings(source_dir=source)

    assert settings.find_source_file("/../outside.js") is None
    assert settings.find_source_file("/js/../../outside.js") is None
