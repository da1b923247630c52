"""Built-in format catalogs and JSON catalog I/O.

Catalogs are built once on first use and shared read-only afterwards.
"""

from __future__ import annotations

from typing import Callable, Dict, List

from fileformat_schema.models.schema import FormatCatalog

from .catalog_io import catalog_from_dict, dump_catalog, load_catalog
from .ghdr import ghdr_catalog

_FACTORIES: Dict[str, Callable[[], FormatCatalog]] = {
    "GHDR": ghdr_catalog,
}
_BUILT: Dict[str, FormatCatalog] = {}


def available_formats() -> List[str]:
    return sorted(_FACTORIES)


def get_format(tag: str) -> FormatCatalog:
    """Return the built-in catalog for ``tag`` (case-insensitive)."""
    key = tag.upper()
    if key not in _FACTORIES:
        raise KeyError(f"unknown file format {tag!r} (available: {', '.join(available_formats())})")
    if key not in _BUILT:
        _BUILT[key] = _FACTORIES[key]()
    return _BUILT[key]


__all__ = [
    "available_formats",
    "get_format",
    "ghdr_catalog",
    "catalog_from_dict",
    "dump_catalog",
    "load_catalog",
]
