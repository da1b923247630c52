"""Single-node matcher: does one parsed node satisfy one definition's templates?"""

from __future__ import annotations

from typing import Optional

from fileformat_schema.matching.pattern import compile_pattern
from fileformat_schema.models.definition import FormatNodeDefinition
from fileformat_schema.models.node import ParsedNode


def matches(node: ParsedNode, definition: FormatNodeDefinition) -> bool:
    """Return True if both the title and the data of ``node`` match ``definition``.

    Never raises for file content; a template that cannot be compiled is a
    schema authoring error and is rejected when the schema is built.
    """
    return (
        compile_pattern(definition.title_pattern).match(node.title)
        and compile_pattern(definition.data_pattern).match(node.data)
    )


def mismatch_reason(node: ParsedNode, definition: FormatNodeDefinition) -> Optional[str]:
    """Explain why ``node`` does not match ``definition`` (None if it does)."""
    title_ok = compile_pattern(definition.title_pattern).match(node.title)
    data_ok = compile_pattern(definition.data_pattern).match(node.data)
    if title_ok and data_ok:
        return None
    parts = []
    if not title_ok:
        parts.append(f"title {node.title!r} !~ {definition.title_pattern!r}")
    if not data_ok:
        parts.append(f"data {node.data!r} !~ {definition.data_pattern!r}")
    return "; ".join(parts)
