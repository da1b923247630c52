from .definition import ABSENT, HEAD, FormatNodeDefinition, NodeRef, Sentinel
from .node import ParsedNode, build_outline, link_siblings
from .schema import FormatCatalog, Schema

__all__ = [
    "ABSENT",
    "HEAD",
    "FormatNodeDefinition",
    "NodeRef",
    "Sentinel",
    "ParsedNode",
    "build_outline",
    "link_siblings",
    "FormatCatalog",
    "Schema",
]
