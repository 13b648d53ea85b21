"""Unified diff parsing and application.

``apply_patch`` is the entry point: it parses the text, applies every file
diff under a root directory and returns an :class:`ApplyResult`. ``parse_patch``
is available on its own for callers that want to validate a patch upfront.
"""

from __future__ import annotations

from unipatch.patch.applier import HunkMismatchError, PatchApplyError, apply_hunk, apply_hunks
from unipatch.patch.dispatcher import ExistenceError, FileOperation, FileOutcome, classify, dispatch
from unipatch.patch.engine import ApplyResult, apply_patch, run
from unipatch.patch.parser import DEV_NULL, DiffLine, FileDiff, Hunk, LineKind, Patch, PatchParseError, parse_patch

__all__ = [
    "DEV_NULL",
    "ApplyResult",
    "DiffLine",
    "ExistenceError",
    "FileDiff",
    "FileOperation",
    "FileOutcome",
    "Hunk",
    "HunkMismatchError",
    "LineKind",
    "Patch",
    "PatchApplyError",
    "PatchParseError",
    "apply_hunk",
    "apply_hunks",
    "apply_patch",
    "classify",
    "dispatch",
    "parse_patch",
    "run",
]
