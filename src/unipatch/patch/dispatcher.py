"""Per-file operations: create, delete or modify a file from a FileDiff."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from unipatch.fs import FsBoundary, WorkingTree
from unipatch.patch.applier import HunkFailure, PatchApplyError, apply_hunks, join_lines, split_lines
from unipatch.patch.parser import FileDiff

_logger = logging.getLogger(__name__)


class ExistenceError(PatchApplyError):
    """The target's existence does not fit the operation."""


class FileOperation(str, Enum):
    CREATE = "create"
    DELETE = "delete"
    MODIFY = "modify"


@dataclass(frozen=True, slots=True)
class FileOutcome:
    path: str
    operation: FileOperation
    hunks_applied: int
    failures: tuple[HunkFailure, ...] = field(default_factory=tuple)

    @property
    def touched(self) -> bool:
        """True if the file was (or, in a dry run, would be) changed."""

        if self.operation is FileOperation.MODIFY:
            return self.hunks_applied > 0
        return True


def classify(file_diff: FileDiff) -> FileOperation:
    if file_diff.is_create:
        return FileOperation.CREATE
    if file_diff.is_delete:
        return FileOperation.DELETE
    return FileOperation.MODIFY


def dispatch(
    file_diff: FileDiff,
    tree: WorkingTree,
    boundary: FsBoundary,
    *,
    logger: logging.Logger | None = None,
) -> FileOutcome:
    """Perform the file operation described by ``file_diff``.

    Raises :class:`~unipatch.fs.FsViolationError` when the path leaves the
    root and :class:`ExistenceError` when the target's presence is wrong for
    the operation; in both cases nothing is touched. Hunk mismatches in a
    modification are returned in the outcome rather than raised. Per-file log
    lines go to ``logger`` when given, else to the module logger.
    """

    log = logger or _logger
    operation = classify(file_diff)
    display = file_diff.path
    target = boundary.sanitize_path(display)

    if operation is FileOperation.CREATE:
        return _create(file_diff, target, display, tree, log)
    if operation is FileOperation.DELETE:
        return _delete(file_diff, target, display, tree, log)
    return _modify(file_diff, target, display, tree, log)


def _create(
    file_diff: FileDiff, target: Path, display: str, tree: WorkingTree, log: logging.Logger
) -> FileOutcome:
    if tree.exists(target):
        raise ExistenceError(f"File already exists: {display}")

    content: list[str] = []
    for hunk in file_diff.hunks:
        content.extend(hunk.post_image())
    tree.write_text(target, "\n".join(content))

    log.info("%s file: %s", _verb("Created", tree), display)
    return FileOutcome(path=display, operation=FileOperation.CREATE, hunks_applied=len(file_diff.hunks))


def _delete(
    file_diff: FileDiff, target: Path, display: str, tree: WorkingTree, log: logging.Logger
) -> FileOutcome:
    if not tree.exists(target):
        raise ExistenceError(f"File does not exist for deletion: {display}")

    tree.delete(target)

    log.info("%s file: %s", _verb("Deleted", tree), display)
    return FileOutcome(path=display, operation=FileOperation.DELETE, hunks_applied=len(file_diff.hunks))


def _modify(
    file_diff: FileDiff, target: Path, display: str, tree: WorkingTree, log: logging.Logger
) -> FileOutcome:
    if not tree.exists(target):
        raise ExistenceError(f"File does not exist: {display}")
    if tree.is_dir(target):
        raise ExistenceError(f"Target is a directory: {display}")

    original, trailing_newline = split_lines(tree.read_text(target))
    outcome = apply_hunks(original, file_diff.hunks)

    if outcome.applied:
        tree.write_text(target, join_lines(outcome.lines, trailing_newline))
        log.info("%s file: %s (%d/%d hunks)", _verb("Patched", tree), display, outcome.applied, len(file_diff.hunks))
    for failure in outcome.failures:
        log.warning("Hunk %d failed for %s: %s", failure.index, display, failure.error)

    return FileOutcome(
        path=display,
        operation=FileOperation.MODIFY,
        hunks_applied=outcome.applied,
        failures=tuple(outcome.failures),
    )


def _verb(action: str, tree: WorkingTree) -> str:
    return f"{action} (dry run)" if tree.dry_run else action


__all__ = ["ExistenceError", "FileOperation", "FileOutcome", "classify", "dispatch"]
