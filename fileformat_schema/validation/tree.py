"""Tree verification: check a whole parsed file against one schema.

Steps
-----
1. The file extension must equal the schema's (case-insensitive).
2. The first node is the header (see :mod:`fileformat_schema.validation.header`).
3. The nodes after the header are walked depth-first.  At every position the
   candidate definitions are tried in order and the first one whose templates
   match binds the node; its ``children`` and ``next_siblings`` name the
   candidates for the first child and the next sibling.
4. A missing node is fine only where the candidates contain ``ABSENT``.

No failure stops the pass: every problem is recorded and the verdict is the
conjunction of all checks.  Once a node is bound the other candidates are not
retried, even if its subtree later fails.

The walk uses an explicit stack, so deep documents or long sibling chains do
not hit the interpreter recursion limit.  Parent and previous-sibling links
are never inspected.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any, Callable, Dict, List, Optional, Set, Tuple, Union

import pandas as pd

from fileformat_schema.matching.node_match import matches, mismatch_reason
from fileformat_schema.models.definition import ABSENT, FormatNodeDefinition, NodeRef, Sentinel, format_refs
from fileformat_schema.models.node import ParsedNode
from fileformat_schema.models.schema import FormatCatalog, Schema
from fileformat_schema.validation.diagnostics import (
    CANDIDATE_REJECTED,
    CYCLIC_LINK,
    EXTENSION_MISMATCH,
    FAILURE_CODES,
    MISSING_NODE,
    NODE_LIMIT,
    NODE_MATCHED,
    START,
    UNIDENTIFIED_NODE,
    VERDICT,
    Diagnostic,
    DiagnosticLog,
    diagnostics_frame,
    summarize,
)
from fileformat_schema.validation.header import verify_header

# External collaborator: reads a file and returns its header node.
Loader = Callable[[str], Optional[ParsedNode]]


# ---------------------------------------------------------------------------
# Options / report
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VerifierOptions:
    """Verification settings.

    trace : bool
        Record ``debug`` entries (every rejected candidate, every binding).
    max_nodes : int or None
        Stop walking after this many nodes (reported as ``node-limit``).
    """

    trace: bool = False
    max_nodes: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> VerifierOptions:
        return cls(**d)


@dataclass(frozen=True)
class VerificationReport:
    file_path: str
    format_tag: str
    version_label: str
    extension: str
    ok: bool
    extension_ok: bool
    header_ok: bool
    nodes_ok: bool
    n_nodes: int
    diagnostics: Tuple[Diagnostic, ...] = ()

    def __bool__(self) -> bool:
        return self.ok

    @property
    def problems(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.code in FAILURE_CODES]

    def by_code(self, code: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.code == code]

    def summary(self) -> str:
        head = f"{self.file_path} [{self.format_tag} {self.version_label}]: {'OK' if self.ok else 'FAILED'}"
        return head + "\n" + summarize(self.diagnostics)

    def to_frame(self) -> pd.DataFrame:
        return diagnostics_frame(self.diagnostics)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def file_extension(file_path: Union[str, PurePath]) -> str:
    """Extension of the last path segment, from its *first* dot ("" if none).

    ``"saves/archive.tar.ghdr"`` -> ``".tar.ghdr"``
    """
    name = str(file_path).replace("\\", "/").rsplit("/", 1)[-1]
    dot = name.find(".")
    return name[dot:] if dot >= 0 else ""


@dataclass(frozen=True)
class _Frame:
    node: Optional[ParsedNode]
    candidates: Tuple[NodeRef, ...]
    parent_path: str
    index: int


# ---------------------------------------------------------------------------
# Verifier
# ---------------------------------------------------------------------------


class SchemaVerifier:
    """Verifies parsed files against the schemas of one format catalog."""

    def __init__(self, catalog: FormatCatalog, options: Optional[VerifierOptions] = None) -> None:
        self.catalog = catalog
        self.options = options or VerifierOptions()

    def verify(
        self,
        schema: Schema,
        root: Optional[ParsedNode],
        file_path: Union[str, PurePath],
    ) -> VerificationReport:
        """Verify the tree starting at ``root`` (the header node)."""
        path = str(file_path)
        log = DiagnosticLog(trace=self.options.trace)
        log.info(START, f"verifying {path} against {self.catalog.format_tag} {schema.version_label}")

        ext = file_extension(path)
        extension_ok = schema.matches_extension(ext)
        if not extension_ok:
            log.error(EXTENSION_MISMATCH, f"file extension is {ext!r}, expected {schema.file_extension!r}")

        header_ok = verify_header(root, self.catalog, schema, log)
        first = root.next_sibling if root is not None else None
        nodes_ok, n_nodes = self._walk(schema, first, schema.head_candidates(), log)

        ok = extension_ok and header_ok and nodes_ok
        if ok:
            log.info(VERDICT, f"{path} matches {self.catalog.format_tag} {schema.version_label}")
        else:
            log.warning(VERDICT, f"{path} does not match {self.catalog.format_tag} {schema.version_label}")

        return VerificationReport(
            file_path=path,
            format_tag=self.catalog.format_tag,
            version_label=schema.version_label,
            extension=ext,
            ok=ok,
            extension_ok=extension_ok,
            header_ok=header_ok,
            nodes_ok=nodes_ok,
            n_nodes=n_nodes,
            diagnostics=log.entries,
        )

    def _bind(
        self,
        schema: Schema,
        node: ParsedNode,
        candidates: Tuple[NodeRef, ...],
        where: str,
        log: DiagnosticLog,
    ) -> Optional[FormatNodeDefinition]:
        """First candidate whose templates match ``node`` (None if none does)."""
        for ref in candidates:
            if isinstance(ref, Sentinel):
                continue
            definition = schema.get(ref)
            if matches(node, definition):
                return definition
            if log.trace:
                log.debug(CANDIDATE_REJECTED, f"not {ref}: {mismatch_reason(node, definition)}", path=where, node=node)
        return None

    def _walk(
        self,
        schema: Schema,
        first: Optional[ParsedNode],
        candidates: Tuple[NodeRef, ...],
        log: DiagnosticLog,
    ) -> Tuple[bool, int]:
        ok = True
        n_nodes = 0
        seen: Set[int] = set()
        max_nodes = self.options.max_nodes
        # Header is sibling #0 of the top-level chain.
        stack: List[_Frame] = [_Frame(first, tuple(candidates), "", 1)]

        while stack:
            frame = stack.pop()
            node = frame.node
            where = f"{frame.parent_path}/#{frame.index}"

            if node is None:
                if ABSENT not in frame.candidates:
                    log.error(
                        MISSING_NODE,
                        f"required node missing (expected one of: {format_refs(frame.candidates)})",
                        path=where,
                    )
                    ok = False
                continue

            if id(node) in seen:
                log.error(CYCLIC_LINK, f"node {node.title!r} reached twice; links form a cycle", path=where, node=node)
                ok = False
                continue
            seen.add(id(node))

            n_nodes += 1
            if max_nodes is not None and n_nodes > max_nodes:
                log.error(NODE_LIMIT, f"stopped after {max_nodes} nodes", path=where, node=node)
                ok = False
                n_nodes -= 1
                break

            bound = self._bind(schema, node, frame.candidates, where, log)
            if bound is None:
                log.warning(
                    UNIDENTIFIED_NODE,
                    f"node {node.title!r}:{node.data!r} could not be identified "
                    f"(candidates: {format_refs(frame.candidates)})",
                    path=where,
                    node=node,
                )
                ok = False
                continue

            log.debug(NODE_MATCHED, f"{bound.describe()} <- {node.title!r}:{node.data!r}", path=where, node=node)
            here = f"{frame.parent_path}/{bound.name}[{frame.index}]"
            # LIFO: the child chain is walked before the next sibling.
            stack.append(_Frame(node.next_sibling, bound.next_siblings, frame.parent_path, frame.index + 1))
            stack.append(_Frame(node.first_child, bound.children, here, 0))

        return ok, n_nodes


# ---------------------------------------------------------------------------
# Convenience entry points
# ---------------------------------------------------------------------------


def verify_tree(
    catalog: FormatCatalog,
    schema: Schema,
    root: Optional[ParsedNode],
    file_path: Union[str, PurePath],
    options: Optional[VerifierOptions] = None,
) -> VerificationReport:
    return SchemaVerifier(catalog, options).verify(schema, root, file_path)


def verify_file(
    catalog: FormatCatalog,
    version_label: str,
    file_path: Union[str, PurePath],
    loader: Loader,
    options: Optional[VerifierOptions] = None,
) -> VerificationReport:
    """Load ``file_path`` with ``loader`` and verify it against ``version_label``.

    Raises
    ------
    KeyError
        If the catalog has no such version.
    Exception
        Whatever ``loader`` raises for an unreadable file.
    """
    schema = catalog.get_schema(version_label)
    root = loader(str(file_path))
    return SchemaVerifier(catalog, options).verify(schema, root, file_path)
