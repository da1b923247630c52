"""Node pattern language: parse title/data templates and compile them to regexes.

Template syntax
---------------
- Ordinary characters are literals and must appear verbatim.
- ``<name>`` is a free-text placeholder: one or more characters, up to the
  next literal delimiter (or the end of the string).
- ``<#>`` is an integer placeholder: optional ``-`` followed by digits.
- ``[...]`` is a literal bracket pair around a sub-pattern.  Groups nest.
- ``$[...]`` or ``[$...]`` makes the group's sub-pattern repeatable: one or
  more comma-separated occurrences inside a single pair of brackets.

Matching is total: the whole target string must be consumed.  An empty
template therefore only matches ``""``.

Each template is parsed into a small tagged AST and compiled once (cached)
into a regular expression used with ``fullmatch``.  Example::

    p = compile_pattern("<imagefile>[$<#>,<#>]")
    p.match("bg.png[1,2]")        # True
    p.match("bg.png[1,2,3,4]")    # True (two repetitions)
    p.match("bg.png[1,2,3]")      # False
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import FrozenSet, List, Optional, Tuple, Union

from fileformat_schema.errors import PatternSyntaxError


# ---------------------------------------------------------------------------
# AST
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Placeholder:
    """Free-text field ``<name>``."""

    name: str


@dataclass(frozen=True)
class IntegerPlaceholder:
    """Integer field ``<#>``."""


@dataclass(frozen=True)
class Group:
    """Bracketed sub-pattern; ``repeat`` allows comma-separated repetitions."""

    items: Tuple["Element", ...]
    repeat: bool = False


Element = Union[Literal, Placeholder, IntegerPlaceholder, Group]


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def parse_template(template: str) -> Tuple[Element, ...]:
    """Parse a template into its element sequence.

    Raises
    ------
    PatternSyntaxError
        On unclosed ``<``/``[``, stray ``>``/``]``, empty ``<>`` or an empty
        repeated group.
    """
    items, pos = _parse_sequence(template, 0, inside_group=False)
    if pos != len(template):  # pragma: no cover - _parse_sequence consumes all or raises
        raise PatternSyntaxError(template, pos, "unexpected trailing input")
    return items


def _parse_sequence(text: str, pos: int, *, inside_group: bool) -> Tuple[Tuple[Element, ...], int]:
    items: List[Element] = []
    literal: List[str] = []
    n = len(text)

    def flush() -> None:
        if literal:
            items.append(Literal("".join(literal)))
            literal.clear()

    while pos < n:
        c = text[pos]
        if c == "<":
            end = text.find(">", pos + 1)
            if end < 0:
                raise PatternSyntaxError(text, pos, "unclosed '<'")
            name = text[pos + 1 : end]
            if not name:
                raise PatternSyntaxError(text, pos, "empty placeholder '<>'")
            if any(ch in name for ch in "<[]"):
                raise PatternSyntaxError(text, pos, f"invalid placeholder name {name!r}")
            flush()
            items.append(IntegerPlaceholder() if name == "#" else Placeholder(name))
            pos = end + 1
        elif c == "[" or (c == "$" and text.startswith("[", pos + 1)):
            flush()
            group_start = pos
            repeat = c == "$"
            pos += 2 if repeat else 1
            if text.startswith("$", pos):
                repeat = True
                pos += 1
            sub, pos = _parse_sequence(text, pos, inside_group=True)
            if repeat and not sub:
                raise PatternSyntaxError(text, group_start, "empty repeated group")
            items.append(Group(sub, repeat=repeat))
        elif c == "]":
            if not inside_group:
                raise PatternSyntaxError(text, pos, "stray ']'")
            flush()
            return tuple(items), pos + 1
        elif c == ">":
            raise PatternSyntaxError(text, pos, "stray '>'")
        else:
            literal.append(c)
            pos += 1

    if inside_group:
        raise PatternSyntaxError(text, pos, "unclosed '['")
    flush()
    return tuple(items), pos


# ---------------------------------------------------------------------------
# Compiler
# ---------------------------------------------------------------------------

# Follow context of an element: the characters that may start whatever comes
# next.  _END means "end of the target string"; None means "not a fixed
# character" (another placeholder follows).
_END = frozenset({"\0end"})
Follow = Optional[FrozenSet[str]]

_INTEGER_RE = r"-?[0-9]+"


def _first_chars(el: Element) -> Follow:
    if isinstance(el, Literal):
        return frozenset(el.text[0])
    if isinstance(el, Group):
        return frozenset("[")
    return None


def _compile_sequence(items: Tuple[Element, ...], follow: Follow) -> str:
    parts: List[str] = []
    for el in reversed(items):
        parts.append(_compile_element(el, follow))
        follow = _first_chars(el)
    return "".join(reversed(parts))


def _compile_element(el: Element, follow: Follow) -> str:
    if isinstance(el, Literal):
        return re.escape(el.text)
    if isinstance(el, IntegerPlaceholder):
        return _INTEGER_RE
    if isinstance(el, Placeholder):
        if follow is _END:
            return ".+"
        if follow is None:
            return ".+?"
        stop = "".join(re.escape(ch) for ch in sorted(follow))
        return f"[^{stop}]+"
    # Group
    inner_follow = frozenset("],") if el.repeat else frozenset("]")
    inner = _compile_sequence(el.items, inner_follow)
    if el.repeat:
        return rf"\[(?:{inner})(?:,(?:{inner}))*\]"
    return rf"\[{inner}\]"


@dataclass(frozen=True)
class CompiledPattern:
    """A parsed template together with its exact-match regex."""

    template: str
    elements: Tuple[Element, ...]
    regex: "re.Pattern[str]"

    def match(self, text: str) -> bool:
        return self.regex.fullmatch(text) is not None

    @property
    def placeholders(self) -> Tuple[str, ...]:
        """Placeholder names in template order (``#`` for integers)."""
        out: List[str] = []

        def walk(items: Tuple[Element, ...]) -> None:
            for el in items:
                if isinstance(el, Placeholder):
                    out.append(el.name)
                elif isinstance(el, IntegerPlaceholder):
                    out.append("#")
                elif isinstance(el, Group):
                    walk(el.items)

        walk(self.elements)
        return tuple(out)

    def __str__(self) -> str:
        return self.template


@lru_cache(maxsize=None)
def compile_pattern(template: str) -> CompiledPattern:
    """Parse and compile ``template`` (cached per template string)."""
    elements = parse_template(template)
    source = _compile_sequence(elements, _END)
    return CompiledPattern(template=template, elements=elements, regex=re.compile(source, re.DOTALL))


def pattern_matches(template: str, text: str) -> bool:
    return compile_pattern(template).match(text)
