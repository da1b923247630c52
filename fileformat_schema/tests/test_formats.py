"""Tests for the built-in GHDR catalog, the registry and JSON catalog I/O."""

from __future__ import annotations

import json

import pytest

from fileformat_schema.errors import SchemaError
from fileformat_schema.formats import available_formats, dump_catalog, get_format, load_catalog
from fileformat_schema.formats.catalog_io import catalog_from_dict
from fileformat_schema.models.definition import ABSENT, HEAD
from fileformat_schema.models.node import build_outline
from fileformat_schema.validation.tree import verify_tree


def test_registry() -> None:
    assert "GHDR" in available_formats()
    assert get_format("ghdr") is get_format("GHDR")
    with pytest.raises(KeyError, match="unknown file format"):
        get_format("NOPE")


def test_ghdr_version_1() -> None:
    cat = get_format("GHDR")
    s = cat.get_schema("Version 1.0")
    assert s.version_ordinal == 1
    assert s.file_extension == ".ghdr"
    assert s.head_candidates() == ("head",)
    head, title = s.get("head"), s.get("title")
    assert head.prev_siblings == (HEAD,)
    assert head.children == ("title",)
    assert title.next_siblings == ("title", ABSENT)
    assert title.parents == ("head", ABSENT)
    assert cat.latest() is s


def test_json_roundtrip(tmp_path) -> None:
    cat = get_format("GHDR")
    p = dump_catalog(cat, tmp_path / "cfg" / "ghdr.json")
    raw = json.loads(p.read_text(encoding="utf-8"))
    assert raw["format"] == "GHDR"
    assert raw["schemas"][0]["nodes"][0]["prev_siblings"] == ["@head"]

    cat2 = load_catalog(p)
    assert cat2.to_dict() == cat.to_dict()

    root = build_outline([("GHDR", "Version 1.0"), ("Game", "", [("Menu", "m.png[1,2,3,4]")])])
    assert verify_tree(cat2, cat2.get_schema("Version 1.0"), root, "g.ghdr").ok


def test_load_catalog_errors(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_catalog(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(SchemaError, match="invalid JSON"):
        load_catalog(broken)

    dangling = tmp_path / "dangling.json"
    dangling.write_text(
        json.dumps(
            {
                "format": "X",
                "schemas": [
                    {
                        "version": "v1",
                        "ordinal": 1,
                        "extension": ".x",
                        "nodes": [{"name": "a", "prev_siblings": ["@head"], "children": ["ghost"]}],
                    }
                ],
            }
        ),
        encoding="utf-8",
    )
    with pytest.raises(SchemaError, match="ghost"):
        load_catalog(dangling)


def test_catalog_from_dict_type_check() -> None:
    with pytest.raises(SchemaError):
        catalog_from_dict([])  # type: ignore[arg-type]
