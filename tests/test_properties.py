"""Tests for the persisted key/value tables."""

from pathlib import Path

import pytest

from mergebuild.builder.properties import (
    escape_property,
    format_link_properties,
    format_properties,
    read_link_properties,
    read_properties,
    split_property_line,
    unescape_property,
    write_link_properties,
    write_properties,
)


@pytest.mark.parametrize(
    ("raw", "escaped"),
    [
        ("/cdn/abc.js", "/cdn/abc.js"),
        ("a b", "a\\ b"),
        ("c:d=e", "c\\:d\\=e"),
        ("#x!", "\\#x\\!"),
        ("tab\tnl\ncr\r", "tab\\tnl\\ncr\\r"),
        ("back\\slash", "back\\\\slash"),
    ],
)
def test_escape_property(raw: str, escaped: str) -> None:
    assert escape_property(raw) == escaped
    assert unescape_property(escaped) == raw


def test_escape_none_is_empty() -> None:
    assert escape_property(None) == ""


def test_lines_split_on_first_unescaped_equals() -> None:
    key = "/weird = name: #1!.js"
    value = "/cdn/a=b c.js"
    line = format_properties({key: value}).rstrip("\n")

    assert split_property_line(line) == (key, value)


def test_missing_separator_raises() -> None:
    with pytest.raises(ValueError):
        split_property_line("no separator here")


def test_write_read_preserves_order(tmp_path: Path) -> None:
    entries = {
        "/js/b.js": "/cdn/2.js",
        "/js/a.js": "/cdn/1.js",
        "/cdn/3.js": "/cdn/debug/3.js",
        "/odd path\twith\nstuff": "/cdn/x y.js",
    }
    target = tmp_path / "nested" / "cdn.properties"
    write_properties(target, entries)

    loaded = read_properties(target)
    assert loaded == entries
    assert list(loaded) == list(entries)


def test_write_rewrites_file(tmp_path: Path) -> None:
    target = tmp_path / "cdn.properties"
    write_properties(target, {"/a.js": "/cdn/1.js"})
    write_properties(target, {"/b.js": "/cdn/2.js"})

    assert target.read_text(encoding="utf-8") == "/b.js=/cdn/2.js\n"


def test_link_table_uses_pipes(tmp_path: Path) -> None:
    links = {"/css/site.merge": ["/img/a.png", "/img/b c.png"]}

    assert format_link_properties(links) == "/css/site.merge=/img/a.png|/img/b\\ c.png\n"

    target = tmp_path / "cdn-links.properties"
    write_link_properties(target, links)
    assert read_link_properties(target) == links
