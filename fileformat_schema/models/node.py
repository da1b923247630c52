from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Sequence


@dataclass(eq=False)
class ParsedNode:
    """
    One node of a loaded document.

    Notes
    - A node owns its first child and its next sibling; ``parent`` and
      ``prev_sibling`` are back references for lookup only.
    - The verifier never follows ``parent``/``prev_sibling`` and never mutates
      a node.  Consistency of the links is the loader's responsibility.
    - ``data == ""`` (empty) is a valid value, distinct from a missing node.
    """
    title: str
    data: str = ""
    level: int = 0
    parent: Optional["ParsedNode"] = field(default=None, repr=False)
    prev_sibling: Optional["ParsedNode"] = field(default=None, repr=False)
    next_sibling: Optional["ParsedNode"] = field(default=None, repr=False)
    first_child: Optional["ParsedNode"] = field(default=None, repr=False)

    def iter_siblings(self) -> Iterator["ParsedNode"]:
        """Yield this node and every following sibling."""
        node: Optional[ParsedNode] = self
        while node is not None:
            yield node
            node = node.next_sibling

    def children(self) -> List["ParsedNode"]:
        if self.first_child is None:
            return []
        return list(self.first_child.iter_siblings())

    def __str__(self) -> str:
        return f"{'  ' * self.level}{self.title}:{self.data}"


def link_siblings(nodes: Sequence[ParsedNode], parent: Optional[ParsedNode] = None) -> Optional[ParsedNode]:
    """Link ``nodes`` as one sibling chain under ``parent``; return the first node."""
    prev: Optional[ParsedNode] = None
    for node in nodes:
        node.parent = parent
        node.prev_sibling = prev
        node.next_sibling = None
        if prev is not None:
            prev.next_sibling = node
        prev = node
    first = nodes[0] if nodes else None
    if parent is not None:
        parent.first_child = first
    return first


def build_outline(outline: Sequence[Any], level: int = 0, parent: Optional[ParsedNode] = None) -> Optional[ParsedNode]:
    """
    Build a linked node chain from nested records.

    Each record is ``(title, data)`` or ``(title, data, children)`` where
    ``children`` is itself an outline.  Levels are assigned from the nesting.
    Returns the first top-level node, or None for an empty outline.

    Example::

        root = build_outline([
            ("GHDR", "Version 1.0"),
            ("My Game", "", [("Main Menu", "bg.png[10,20,300,200]")]),
        ])
    """
    nodes: List[ParsedNode] = []
    for rec in outline:
        if isinstance(rec, ParsedNode):
            raise TypeError("build_outline expects (title, data[, children]) records, not ParsedNode")
        if len(rec) not in (2, 3):
            raise ValueError(f"outline record must have 2 or 3 items, got {len(rec)}: {rec!r}")
        node = ParsedNode(title=str(rec[0]), data=str(rec[1]), level=level)
        nodes.append(node)
        if len(rec) == 3 and rec[2]:
            build_outline(rec[2], level=level + 1, parent=node)
    return link_siblings(nodes, parent=parent)
