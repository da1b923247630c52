"""Schema authoring errors.

These are raised while a schema or catalog is being *built*.  Problems found
in a file being verified are never raised; they are reported as diagnostics
(see :mod:`fileformat_schema.validation.diagnostics`).
"""

from __future__ import annotations


class SchemaError(ValueError):
    """A schema, catalog or definition is inconsistent."""


class PatternSyntaxError(SchemaError):
    """A title/data template cannot be parsed."""

    def __init__(self, template: str, pos: int, reason: str) -> None:
        self.template = template
        self.pos = int(pos)
        self.reason = reason
        super().__init__(f"{reason} at position {pos} in template {template!r}")
