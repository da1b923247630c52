"""Content matching: the node template language and the single-node matcher.

Templates are compiled once into exact-match regular expressions and cached,
so matching a node costs two ``fullmatch`` calls.
"""

from .pattern import CompiledPattern, compile_pattern, parse_template, pattern_matches
from .node_match import matches, mismatch_reason

__all__ = [
    "CompiledPattern",
    "compile_pattern",
    "parse_template",
    "pattern_matches",
    "matches",
    "mismatch_reason",
]
