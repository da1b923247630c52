"""Verification of parsed files against a schema.

Design goals
------------
1) Never abort on a file problem: one pass records every mismatch.
2) Thread an explicit diagnostic log instead of a process-wide logger.
3) Walk with an explicit stack so document depth does not hit recursion limits.
"""

from .diagnostics import Diagnostic, DiagnosticLog
from .header import verify_header
from .tree import (
    SchemaVerifier,
    VerificationReport,
    VerifierOptions,
    file_extension,
    verify_file,
    verify_tree,
)
from .batch import VerificationJob, verify_many

__all__ = [
    "Diagnostic",
    "DiagnosticLog",
    "verify_header",
    "SchemaVerifier",
    "VerificationReport",
    "VerifierOptions",
    "file_extension",
    "verify_file",
    "verify_tree",
    "VerificationJob",
    "verify_many",
]
