"""Diagnostic trail produced by one verification pass.

The verifier does not write to a process-wide logger.  Every message is
appended to a :class:`DiagnosticLog` that is threaded through the walk and
frozen into the final report, so two runs over the same input produce equal
trails.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Literal, Optional, Tuple

import pandas as pd

from fileformat_schema.models.node import ParsedNode


Level = Literal["error", "warning", "info", "debug"]

LEVELS: Tuple[str, ...] = ("error", "warning", "info", "debug")

# Codes
START = "start"
EXTENSION_MISMATCH = "extension-mismatch"
HEADER_MISMATCH = "header-mismatch"
MISSING_NODE = "missing-node"
UNIDENTIFIED_NODE = "unidentified-node"
CYCLIC_LINK = "cyclic-link"
NODE_LIMIT = "node-limit"
CANDIDATE_REJECTED = "candidate-rejected"
NODE_MATCHED = "node-matched"
VERDICT = "verdict"

FAILURE_CODES = frozenset(
    {EXTENSION_MISMATCH, HEADER_MISMATCH, MISSING_NODE, UNIDENTIFIED_NODE, CYCLIC_LINK, NODE_LIMIT}
)


@dataclass(frozen=True)
class Diagnostic:
    level: Level
    code: str
    message: str
    path: str = ""
    node: Optional[ParsedNode] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        where = f" @ {self.path}" if self.path else ""
        return f"[{self.level}] {self.code}{where}: {self.message}"


class DiagnosticLog:
    """Append-only list of leveled messages.

    ``debug`` entries (per-candidate trace) are dropped unless ``trace`` is set.
    """

    def __init__(self, *, trace: bool = False) -> None:
        self.trace = bool(trace)
        self._entries: List[Diagnostic] = []

    def add(
        self,
        level: Level,
        code: str,
        message: str,
        *,
        path: str = "",
        node: Optional[ParsedNode] = None,
    ) -> None:
        if level not in LEVELS:
            raise ValueError(f"unknown diagnostic level {level!r}")
        if level == "debug" and not self.trace:
            return
        self._entries.append(Diagnostic(level, code, message, path, node))

    def error(self, code: str, message: str, **kw) -> None:
        self.add("error", code, message, **kw)

    def warning(self, code: str, message: str, **kw) -> None:
        self.add("warning", code, message, **kw)

    def info(self, code: str, message: str, **kw) -> None:
        self.add("info", code, message, **kw)

    def debug(self, code: str, message: str, **kw) -> None:
        self.add("debug", code, message, **kw)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def entries(self) -> Tuple[Diagnostic, ...]:
        return tuple(self._entries)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def by_code(self, code: str) -> List[Diagnostic]:
        return [e for e in self._entries if e.code == code]

    def count(self, level: Level) -> int:
        return sum(1 for e in self._entries if e.level == level)

    @property
    def problems(self) -> List[Diagnostic]:
        return [e for e in self._entries if e.code in FAILURE_CODES]

    def summary(self) -> str:
        return summarize(self._entries)

    def to_frame(self) -> pd.DataFrame:
        return diagnostics_frame(self._entries)


def summarize(entries: Tuple[Diagnostic, ...] | List[Diagnostic]) -> str:
    errors = [e for e in entries if e.level == "error"]
    warnings = [e for e in entries if e.level == "warning"]
    lines = []
    if errors:
        lines.append(f"ERRORS ({len(errors)}):")
        for e in errors:
            lines.append(f"  x {e.code}{' @ ' + e.path if e.path else ''}: {e.message}")
    if warnings:
        lines.append(f"WARNINGS ({len(warnings)}):")
        for w in warnings:
            lines.append(f"  ! {w.code}{' @ ' + w.path if w.path else ''}: {w.message}")
    if not errors and not warnings:
        lines.append("All checks passed")
    return "\n".join(lines)


def diagnostics_frame(entries) -> pd.DataFrame:
    """Tabulate diagnostics (one row per entry, trail order)."""
    rows = [{"level": e.level, "code": e.code, "path": e.path, "message": e.message} for e in entries]
    return pd.DataFrame(rows, columns=["level", "code", "path", "message"])
