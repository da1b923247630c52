"""Verify many files and tabulate the outcome.

Schemas and catalogs are immutable, so independent files can be verified on
a thread pool without locking.  The result is one DataFrame row per job, in
input order.
"""

from __future__ import annotations

import concurrent.futures as cf
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from fileformat_schema.models.node import ParsedNode
from fileformat_schema.models.schema import Schema
from fileformat_schema.validation.tree import SchemaVerifier, VerificationReport

REPORT_COLUMNS = [
    "file_path",
    "version",
    "ok",
    "extension_ok",
    "header_ok",
    "nodes_ok",
    "n_nodes",
    "n_errors",
    "n_warnings",
    "first_problem",
]


@dataclass(frozen=True)
class VerificationJob:
    """One file to verify.

    ``root`` is either an already-loaded header node or a zero-argument
    callable that loads it (called on the worker thread).
    """

    file_path: str
    schema: Schema
    root: Union[Optional[ParsedNode], Callable[[], Optional[ParsedNode]]]


def _run_one(verifier: SchemaVerifier, job: VerificationJob) -> Union[VerificationReport, Exception]:
    try:
        root = job.root() if callable(job.root) else job.root
        return verifier.verify(job.schema, root, job.file_path)
    except Exception as e:
        # Loader failures are reported per file; the batch keeps going.
        return e


def _row(job: VerificationJob, result: Union[VerificationReport, Exception]) -> dict:
    if isinstance(result, Exception):
        return {
            "file_path": job.file_path,
            "version": job.schema.version_label,
            "ok": False,
            "extension_ok": False,
            "header_ok": False,
            "nodes_ok": False,
            "n_nodes": 0,
            "n_errors": 1,
            "n_warnings": 0,
            "first_problem": f"load failed ({type(result).__name__}: {result})",
        }
    problems = result.problems
    return {
        "file_path": result.file_path,
        "version": result.version_label,
        "ok": result.ok,
        "extension_ok": result.extension_ok,
        "header_ok": result.header_ok,
        "nodes_ok": result.nodes_ok,
        "n_nodes": result.n_nodes,
        "n_errors": sum(1 for d in result.diagnostics if d.level == "error"),
        "n_warnings": sum(1 for d in problems if d.level == "warning"),
        "first_problem": str(problems[0]) if problems else "",
    }


def run_jobs(
    verifier: SchemaVerifier,
    jobs: Sequence[VerificationJob],
    max_workers: Optional[int] = None,
) -> List[Tuple[VerificationJob, Union[VerificationReport, Exception]]]:
    """Verify ``jobs``; results are returned in input order."""
    jobs = list(jobs)
    if max_workers is None or max_workers <= 1 or len(jobs) <= 1:
        return [(job, _run_one(verifier, job)) for job in jobs]
    with cf.ThreadPoolExecutor(max_workers=max_workers) as ex:
        results = list(ex.map(lambda j: _run_one(verifier, j), jobs))
    return list(zip(jobs, results))


def verify_many(
    verifier: SchemaVerifier,
    jobs: Sequence[VerificationJob],
    max_workers: Optional[int] = None,
) -> pd.DataFrame:
    """Verify every job and return a summary DataFrame (``REPORT_COLUMNS``)."""
    rows = [_row(job, result) for job, result in run_jobs(verifier, jobs, max_workers=max_workers)]
    df = pd.DataFrame(rows, columns=REPORT_COLUMNS)
    if not df.empty:
        df["ok"] = df["ok"].astype(bool)
        df["n_nodes"] = df["n_nodes"].astype(int)
    return df
