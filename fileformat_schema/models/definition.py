"""Format node definitions -- one named node type of a file-format schema.

A definition pairs the content templates a node must satisfy (title and data)
with the names of the node types allowed around it.  The four relation sets
are ordered: the order is the try-order used by the tree verifier, and the
first definition that matches a node is the one that binds.

Two reserved references exist besides ordinary definition names:

- ``ABSENT``: "it is valid for this relation to be missing"
- ``HEAD``: "comes immediately after the file header" (only meaningful in
  ``prev_siblings``)
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple, Union

from fileformat_schema.errors import SchemaError


class Sentinel(enum.Enum):
    """Reserved relation targets that are not definition names."""

    ABSENT = "absent"
    HEAD = "head"

    def __repr__(self) -> str:
        return self.name


ABSENT = Sentinel.ABSENT
HEAD = Sentinel.HEAD

NodeRef = Union[str, Sentinel]

# Declarative spelling of the sentinels (JSON has no enum).
HEAD_TOKEN = "@head"

NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.\-]*$")

RELATIONS = ("parents", "prev_siblings", "next_siblings", "children")


def ref_to_token(ref: NodeRef) -> Optional[str]:
    """Encode a reference for dict/JSON output (``ABSENT`` -> None)."""
    if ref is ABSENT:
        return None
    if ref is HEAD:
        return HEAD_TOKEN
    return ref


def ref_from_token(token: Optional[str]) -> NodeRef:
    if token is None:
        return ABSENT
    if token == HEAD_TOKEN:
        return HEAD
    if isinstance(token, Sentinel):
        return token
    return str(token)


def format_refs(refs: Iterable[NodeRef]) -> str:
    """Render a relation set for diagnostics, e.g. ``title, <absent>``."""
    parts = []
    for r in refs:
        parts.append(f"<{r.value}>" if isinstance(r, Sentinel) else r)
    return ", ".join(parts) if parts else "<none>"


def _as_refs(values: Optional[Iterable[Any]]) -> Tuple[NodeRef, ...]:
    if values is None:
        return ()
    if isinstance(values, (str, Sentinel)):
        values = (values,)
    return tuple(ref_from_token(v) for v in values)


@dataclass(frozen=True)
class FormatNodeDefinition:
    """One named node type.

    Attributes
    ----------
    name : str
        Unique identifier inside a schema.
    title_pattern, data_pattern : str
        Templates in the node pattern language (see
        :mod:`fileformat_schema.matching.pattern`).  An empty template only
        accepts an empty string.
    level : int
        Expected nesting depth.  Informational only; the verifier does not
        enforce it.
    parents, prev_siblings, next_siblings, children : tuple of NodeRef
        Allowed neighbour types, in try-order.  May contain ``ABSENT``.
        Left empty, a relation defaults to ``(ABSENT,)``.
    """

    name: str
    title_pattern: str = ""
    data_pattern: str = ""
    level: int = 0
    parents: Tuple[NodeRef, ...] = field(default_factory=tuple)
    prev_siblings: Tuple[NodeRef, ...] = field(default_factory=tuple)
    next_siblings: Tuple[NodeRef, ...] = field(default_factory=tuple)
    children: Tuple[NodeRef, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Callers may pass lists or single names; store tuples.  An empty
        # relation means the neighbour must be absent.
        for rel in RELATIONS:
            object.__setattr__(self, rel, _as_refs(getattr(self, rel)) or (ABSENT,))
        object.__setattr__(self, "level", int(self.level))

    # ------------------------------------------------------------------
    # Relation helpers
    # ------------------------------------------------------------------

    def iter_references(self) -> Iterator[Tuple[str, NodeRef]]:
        """Yield ``(relation, ref)`` for every entry of the four relation sets."""
        for rel in RELATIONS:
            for ref in getattr(self, rel):
                yield rel, ref

    @property
    def allows_absent_child(self) -> bool:
        return ABSENT in self.children

    @property
    def allows_absent_next_sibling(self) -> bool:
        return ABSENT in self.next_siblings

    @property
    def follows_header(self) -> bool:
        return HEAD in self.prev_siblings

    def describe(self) -> str:
        return f"{self.name}: title={self.title_pattern!r} data={self.data_pattern!r}"

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "name": self.name,
            "title": self.title_pattern,
            "data": self.data_pattern,
            "level": self.level,
        }
        for rel in RELATIONS:
            d[rel] = [ref_to_token(r) for r in getattr(self, rel)]
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> FormatNodeDefinition:
        """Reconstruct from the dict form (``title``/``data`` keys hold the templates)."""
        d = dict(d)
        if "name" not in d:
            raise SchemaError("format node definition requires a 'name'")
        kwargs: Dict[str, Any] = dict(
            name=str(d.pop("name")),
            title_pattern=str(d.pop("title", d.pop("title_pattern", "")) or ""),
            data_pattern=str(d.pop("data", d.pop("data_pattern", "")) or ""),
            level=int(d.pop("level", 0)),
        )
        for rel in RELATIONS:
            kwargs[rel] = _as_refs(d.pop(rel, ()))
        if d:
            raise SchemaError(f"unknown keys in definition {kwargs['name']!r}: {sorted(d)}")
        return cls(**kwargs)
