"""Patch orchestration: run every FileDiff and aggregate one report."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from unipatch.fs import FsBoundary, FsViolationError, SimulatedTree, WorkingTree
from unipatch.patch.applier import PatchApplyError
from unipatch.patch.dispatcher import dispatch
from unipatch.patch.parser import Patch, PatchParseError, parse_patch

_logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ApplyResult:
    files_modified: list[str] = field(default_factory=list)
    hunks_applied: int = 0
    hunks_failed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.hunks_failed == 0

    def record_file(self, path: str) -> None:
        if path not in self.files_modified:
            self.files_modified.append(path)

    def record_failure(self, message: str, hunks: int = 1) -> None:
        self.errors.append(message)
        self.hunks_failed += max(hunks, 1)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "files_modified": list(self.files_modified),
            "hunks_applied": self.hunks_applied,
            "hunks_failed": self.hunks_failed,
            "errors": list(self.errors),
        }


def apply_patch(
    patch_text: str,
    root: Path | str | None = None,
    *,
    dry_run: bool = False,
    reverse: bool = False,
    encoding: str = "utf-8",
    logger: logging.Logger | None = None,
) -> ApplyResult:
    """Parse ``patch_text`` and apply it under ``root``.

    Never raises for malformed patches, missing files or mismatched hunks;
    every problem is reported in the returned :class:`ApplyResult`.
    """

    log = logger or _logger
    try:
        patch = parse_patch(patch_text)
    except PatchParseError as exc:
        log.warning("Rejected patch: %s", exc)
        result = ApplyResult()
        result.record_failure(f"Invalid patch format: {exc}")
        return result

    return run(patch, root, dry_run=dry_run, reverse=reverse, encoding=encoding, logger=logger)


def run(
    patch: Patch,
    root: Path | str | None = None,
    *,
    dry_run: bool = False,
    reverse: bool = False,
    encoding: str = "utf-8",
    logger: logging.Logger | None = None,
) -> ApplyResult:
    """Apply an already parsed patch, one file at a time in patch order.

    A failure in one file never stops later files from being attempted.
    Hunks that applied stay applied even when a sibling hunk in the same
    file failed.
    """

    log = logger or _logger
    boundary = FsBoundary(root)
    tree: WorkingTree = SimulatedTree(encoding) if dry_run else WorkingTree(encoding)
    if reverse:
        patch = patch.reversed()

    log.info("Applying patch (dry_run: %s, reverse: %s) in %s", dry_run, reverse, boundary.root)

    result = ApplyResult()
    for file_diff in patch:
        hunk_count = len(file_diff.hunks)
        try:
            outcome = dispatch(file_diff, tree, boundary, logger=log)
        except (FsViolationError, PatchApplyError) as exc:
            log.warning("%s", exc)
            result.record_failure(str(exc), hunk_count)
            continue
        except OSError as exc:
            log.error("Error patching %s: %s", file_diff.path, exc)
            result.record_failure(f"Error processing {file_diff.path}: {exc.strerror or exc}", hunk_count)
            continue
        except UnicodeError as exc:
            log.error("Error patching %s: %s", file_diff.path, exc)
            result.record_failure(f"Error processing {file_diff.path}: {exc}", hunk_count)
            continue

        result.hunks_applied += outcome.hunks_applied
        if outcome.touched:
            result.record_file(outcome.path)
        for failure in outcome.failures:
            result.record_failure(f"Failed to apply hunk {failure.index} to {outcome.path}: {failure.error}")

    log.info(
        "Patch %s complete: %d files, %d hunks applied, %d failed",
        "dry-run" if dry_run else "application",
        len(result.files_modified),
        result.hunks_applied,
        result.hunks_failed,
    )
    return result


__all__ = ["ApplyResult", "apply_patch", "run"]
