"""Exact-match hunk application.

:func:`apply_hunk` applies a single hunk at its header position shifted by
the cumulative offset of earlier hunks; :func:`apply_hunks` folds a file's
hunks through it, carrying ``(lines, offset)`` forward and skipping hunks
that fail to match.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from unipatch.patch.parser import Hunk, LineKind


class PatchApplyError(Exception):
    """Raised when a patch cannot be applied cleanly."""


class HunkMismatchError(PatchApplyError):
    """A context or removed line does not match the file content."""

    def __init__(self, message: str, *, line_number: int, expected: str, actual: str | None) -> None:
        super().__init__(message)
        self.line_number = line_number
        self.expected = expected
        self.actual = actual


@dataclass(frozen=True, slots=True)
class HunkApplication:
    lines: list[str]
    delta: int


@dataclass(frozen=True, slots=True)
class HunkFailure:
    index: int
    hunk: Hunk
    error: HunkMismatchError


@dataclass(slots=True)
class HunksOutcome:
    lines: list[str]
    applied: int = 0
    failures: list[HunkFailure] = field(default_factory=list)


def start_index(hunk: Hunk, offset: int) -> int:
    """0-based index of the first line the hunk reads.

    A pure insertion (``-N,0``) anchors after line N, so its start is N
    rather than N - 1.
    """

    base = hunk.old_start if hunk.old_lines == 0 else hunk.old_start - 1
    return max(base, 0) + offset


def apply_hunk(lines: Sequence[str], hunk: Hunk, offset: int = 0) -> HunkApplication:
    """Apply ``hunk`` to ``lines`` and return the new lines and line delta.

    Context and removed lines must equal the file line at the cursor exactly.
    On mismatch :class:`HunkMismatchError` is raised and ``lines`` is left
    untouched.
    """

    start = start_index(hunk, offset)
    if start < 0 or start > len(lines):
        raise HunkMismatchError(
            f"hunk starts at line {start + 1} but file has {len(lines)} lines",
            line_number=start + 1,
            expected="",
            actual=None,
        )

    cursor = start
    chunk: list[str] = []
    for diff_line in hunk.lines:
        if diff_line.kind is LineKind.ADD:
            chunk.append(diff_line.text)
            continue

        actual = lines[cursor] if cursor < len(lines) else None
        if actual != diff_line.text:
            raise _mismatch(diff_line.kind, diff_line.text, actual, cursor + 1)
        if diff_line.kind is LineKind.CONTEXT:
            chunk.append(actual)
        cursor += 1

    new_lines = [*lines[:start], *chunk, *lines[cursor:]]
    return HunkApplication(lines=new_lines, delta=hunk.added - hunk.removed)


def apply_hunks(lines: Sequence[str], hunks: Sequence[Hunk]) -> HunksOutcome:
    """Apply ``hunks`` in order, threading the cumulative offset.

    A failing hunk is recorded and skipped; the hunks after it are still
    attempted against the lines produced by the ones that succeeded.
    """

    outcome = HunksOutcome(lines=list(lines))
    offset = 0
    for index, hunk in enumerate(hunks, start=1):
        try:
            result = apply_hunk(outcome.lines, hunk, offset)
        except HunkMismatchError as exc:
            outcome.failures.append(HunkFailure(index=index, hunk=hunk, error=exc))
            continue
        outcome.lines = result.lines
        offset += result.delta
        outcome.applied += 1
    return outcome


def split_lines(text: str) -> tuple[list[str], bool]:
    """Split file text into lines and report whether it ends with a newline.

    An empty file counts as newline-terminated so lines added to it end with
    one, and removing everything from a file round-trips.
    """

    if text == "":
        return [], True
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
        return lines, True
    return lines, False


def join_lines(lines: Sequence[str], trailing_newline: bool) -> str:
    text = "\n".join(lines)
    if trailing_newline and lines:
        text += "\n"
    return text


def _mismatch(kind: LineKind, expected: str, actual: str | None, line_number: int) -> HunkMismatchError:
    role = "context" if kind is LineKind.CONTEXT else "removed"
    found = "end of file" if actual is None else repr(actual)
    return HunkMismatchError(
        f"{role} line mismatch at line {line_number}: expected {expected!r}, found {found}",
        line_number=line_number,
        expected=expected,
        actual=actual,
    )


__all__ = [
    "HunkApplication",
    "HunkFailure",
    "HunkMismatchError",
    "HunksOutcome",
    "PatchApplyError",
    "apply_hunk",
    "apply_hunks",
    "join_lines",
    "split_lines",
    "start_index",
]
