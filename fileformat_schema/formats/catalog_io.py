"""Declarative catalogs: read and write :class:`FormatCatalog` as JSON.

Layout::

    {
      "format": "GHDR",
      "schemas": [
        {
          "version": "Version 1.0", "ordinal": 1, "extension": ".ghdr",
          "nodes": [
            {"name": "head", "title": "<fileTitle>", "data": "", "level": 0,
             "parents": [], "prev_siblings": ["@head"],
             "next_siblings": [], "children": ["title"]},
            ...
          ]
        }
      ]
    }

``null`` in a relation list means "absence is valid", ``"@head"`` is the
header marker.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Union

from fileformat_schema.errors import SchemaError
from fileformat_schema.models.schema import FormatCatalog


def catalog_from_dict(d: Dict[str, Any]) -> FormatCatalog:
    if not isinstance(d, dict):
        raise SchemaError(f"catalog must be a JSON object, got {type(d).__name__}")
    return FormatCatalog.from_dict(d)


def load_catalog(path: Union[str, Path]) -> FormatCatalog:
    p = Path(path).expanduser().resolve()
    if not p.is_file():
        raise FileNotFoundError(f"Catalog file not found: {p}")
    with open(p, encoding="utf-8") as f:
        try:
            d = json.load(f)
        except json.JSONDecodeError as e:
            raise SchemaError(f"{p.name}: invalid JSON ({e})") from e
    return catalog_from_dict(d)


def dump_catalog(catalog: FormatCatalog, path: Union[str, Path]) -> Path:
    p = Path(path).expanduser()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(catalog.to_dict(), indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return p
