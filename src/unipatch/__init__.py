"""Apply unified diffs to a working tree."""

from __future__ import annotations

__version__ = "0.1.0"

from unipatch.patch import ApplyResult, Patch, PatchParseError, apply_patch, parse_patch, run

__all__ = [
    "__version__",
    "ApplyResult",
    "Patch",
    "PatchParseError",
    "apply_patch",
    "parse_patch",
    "run",
]
