"""Header node verification.

Every file starts with a header node that identifies the format and the
version it was written with, e.g.::

    GHDR:Version 1.0

The title must be the catalog's format tag.  The data must name the schema's
version, either by label (``"Version 1.0"``) or by ordinal (``"1"``).  A
mismatch is reported in the diagnostic log and makes the verdict false; it is
never raised.
"""

from __future__ import annotations

from typing import Optional

from fileformat_schema.models.node import ParsedNode
from fileformat_schema.models.schema import FormatCatalog, Schema
from fileformat_schema.validation.diagnostics import HEADER_MISMATCH, NODE_MATCHED, DiagnosticLog

HEADER_PATH = "/header"


def declared_schema(node: ParsedNode, catalog: FormatCatalog) -> Optional[Schema]:
    """Resolve the version a header declares to a catalog schema (None if unknown)."""
    text = node.data.strip()
    if text in catalog.schemas:
        return catalog.schemas[text]
    try:
        ordinal = int(text)
    except ValueError:
        return None
    return catalog.find_by_ordinal(ordinal)


def verify_header(
    node: Optional[ParsedNode],
    catalog: FormatCatalog,
    schema: Schema,
    log: DiagnosticLog,
) -> bool:
    if node is None:
        log.error(HEADER_MISMATCH, "file has no header node", path=HEADER_PATH)
        return False

    ok = True
    if node.title != catalog.format_tag:
        log.error(
            HEADER_MISMATCH,
            f"format tag is {node.title!r}, expected {catalog.format_tag!r}",
            path=HEADER_PATH,
            node=node,
        )
        ok = False

    if node.data == schema.version_label or node.data.strip() == str(schema.version_ordinal):
        if ok:
            log.debug(NODE_MATCHED, f"header ok: {node.title} {schema.version_label}", path=HEADER_PATH, node=node)
        return ok

    other = declared_schema(node, catalog)
    if other is not None and other.version_ordinal != schema.version_ordinal:
        age = "older" if other.version_ordinal < schema.version_ordinal else "newer"
        log.error(
            HEADER_MISMATCH,
            f"file declares {other.version_label!r} (ordinal {other.version_ordinal}), {age} than "
            f"{schema.version_label!r} (ordinal {schema.version_ordinal})",
            path=HEADER_PATH,
            node=node,
        )
    else:
        log.error(
            HEADER_MISMATCH,
            f"unrecognised version {node.data!r}, expected {schema.version_label!r}",
            path=HEADER_PATH,
            node=node,
        )
    return False
