"""Unified diff parsing.

Turns ``diff -u`` / ``git diff`` text into an immutable :class:`Patch`: an
ordered tuple of :class:`FileDiff`, each holding its hunks in ascending
source-line order.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import PurePosixPath


class PatchParseError(ValueError):
    """Raised when a patch cannot be parsed."""


DEV_NULL = "/dev/null"
NO_NEWLINE_MARKER = "\\"

_HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(?: ?(.*))?$")

# git emits these between the "diff --git" line and the ---/+++ pair
_EXTENDED_HEADERS = (
    "diff ",
    "index ",
    "old mode ",
    "new mode ",
    "new file mode ",
    "deleted file mode ",
    "similarity index ",
    "dissimilarity index ",
    "rename from ",
    "rename to ",
    "copy from ",
    "copy to ",
    "Only in ",
)


class LineKind(str, Enum):
    CONTEXT = " "
    REMOVE = "-"
    ADD = "+"


@dataclass(frozen=True, slots=True)
class DiffLine:
    kind: LineKind
    text: str

    def reversed(self) -> DiffLine:
        if self.kind is LineKind.ADD:
            return DiffLine(LineKind.REMOVE, self.text)
        if self.kind is LineKind.REMOVE:
            return DiffLine(LineKind.ADD, self.text)
        return self


@dataclass(frozen=True, slots=True)
class Hunk:
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: tuple[DiffLine, ...]
    section: str = ""

    @property
    def added(self) -> int:
        return sum(1 for line in self.lines if line.kind is LineKind.ADD)

    @property
    def removed(self) -> int:
        return sum(1 for line in self.lines if line.kind is LineKind.REMOVE)

    def pre_image(self) -> list[str]:
        """Lines the hunk expects to find (context and removals)."""

        return [line.text for line in self.lines if line.kind is not LineKind.ADD]

    def post_image(self) -> list[str]:
        """Lines the hunk leaves behind (context and additions)."""

        return [line.text for line in self.lines if line.kind is not LineKind.REMOVE]

    def reversed(self) -> Hunk:
        return Hunk(
            old_start=self.new_start,
            old_lines=self.new_lines,
            new_start=self.old_start,
            new_lines=self.old_lines,
            lines=tuple(line.reversed() for line in self.lines),
            section=self.section,
        )


@dataclass(frozen=True, slots=True)
class FileDiff:
    source_path: str
    target_path: str
    hunks: tuple[Hunk, ...]

    @property
    def is_create(self) -> bool:
        return self.source_path == DEV_NULL

    @property
    def is_delete(self) -> bool:
        return self.target_path == DEV_NULL

    @property
    def path(self) -> str:
        """The path this diff acts on: the target, or the source for deletions."""

        return self.source_path if self.is_delete else self.target_path

    def reversed(self) -> FileDiff:
        """Return the diff that undoes this one.

        Source and target swap, so reversing a creation yields a deletion and
        vice versa. Hunks are re-sorted since their source ranges changed.
        """

        hunks = sorted((hunk.reversed() for hunk in self.hunks), key=lambda h: h.old_start)
        return replace(self, source_path=self.target_path, target_path=self.source_path, hunks=tuple(hunks))


@dataclass(frozen=True, slots=True)
class Patch:
    files: tuple[FileDiff, ...]

    def __iter__(self) -> Iterator[FileDiff]:
        return iter(self.files)

    def __len__(self) -> int:
        return len(self.files)

    @property
    def hunk_count(self) -> int:
        return sum(len(file_diff.hunks) for file_diff in self.files)

    def reversed(self) -> Patch:
        return Patch(files=tuple(file_diff.reversed() for file_diff in self.files))


def parse_patch(text: str) -> Patch:
    """Parse unified diff text into a :class:`Patch`.

    Raises :class:`PatchParseError` on malformed headers, empty hunks,
    stray content before the first file header, or when no file sections
    are present at all.
    """

    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()

    files: list[FileDiff] = []
    idx = 0

    while idx < len(lines):
        line = lines[idx]
        if line.startswith("--- ") and idx + 1 < len(lines) and lines[idx + 1].startswith("+++ "):
            file_diff, idx = _parse_file(lines, idx)
            files.append(file_diff)
        elif line.startswith("--- "):
            raise _error("missing +++ header after ---", idx, line)
        elif not line.strip() or line.startswith(_EXTENDED_HEADERS):
            idx += 1
        elif not files:
            raise _error("content before first file header", idx, line)
        else:
            raise _error("unexpected line between file sections", idx, line)

    if not files:
        raise PatchParseError("no file diffs found in patch")
    return Patch(files=tuple(files))


def normalize_path(raw: str) -> str:
    """Strip timestamps and ``a/``/``b/`` prefixes from a header path."""

    path = raw.split("\t", 1)[0].strip()
    if len(path) >= 2 and path[0] == path[-1] == '"':
        path = path[1:-1]
    if path == DEV_NULL:
        return DEV_NULL
    parts = PurePosixPath(path).parts
    if len(parts) > 1 and parts[0] in {"a", "b"}:
        parts = parts[1:]
    if not parts:
        return ""
    normalized = str(PurePosixPath(*parts))
    return DEV_NULL if normalized == "dev/null" else normalized


def _parse_file(lines: list[str], idx: int) -> tuple[FileDiff, int]:
    source = normalize_path(lines[idx][4:])
    target = normalize_path(lines[idx + 1][4:])
    if source == DEV_NULL and target == DEV_NULL:
        raise _error("both sides of file header are /dev/null", idx, lines[idx])
    if not source or not target:
        raise _error("file header without a path", idx, lines[idx] if not source else lines[idx + 1])
    idx += 2

    hunks: list[Hunk] = []
    while idx < len(lines):
        if lines[idx].startswith("@@"):
            hunk, idx = _parse_hunk(lines, idx)
            hunks.append(hunk)
        elif not lines[idx].strip():
            idx += 1
        elif _ends_section(lines, idx):
            break
        else:
            raise _error("invalid line in file section", idx, lines[idx])

    hunks.sort(key=lambda h: h.old_start)
    return FileDiff(source_path=source, target_path=target, hunks=tuple(hunks)), idx


def _parse_hunk(lines: list[str], idx: int) -> tuple[Hunk, int]:
    header = lines[idx]
    match = _HUNK_HEADER.match(header.rstrip("\r"))
    if not match:
        raise _error("invalid hunk header", idx, header)
    header_idx = idx
    old_left = old_lines = int(match.group(2) or "1")
    new_left = new_lines = int(match.group(4) or "1")
    idx += 1

    body: list[DiffLine] = []
    while idx < len(lines):
        line = lines[idx]
        if line.startswith(NO_NEWLINE_MARKER):
            idx += 1
            continue

        # while the header's counts are unmet, a fitting line belongs to the
        # hunk even if it reads like a "---"/"+++" file header
        kind = _counted_kind(line, old_left, new_left)
        if kind is not None:
            body.append(DiffLine(kind, line[1:]))
            if kind is not LineKind.ADD:
                old_left -= 1
            if kind is not LineKind.REMOVE:
                new_left -= 1
            idx += 1
            continue

        # counts met (or wrong): find the next section by its headers
        if line.startswith("@@") or _ends_section(lines, idx):
            break
        if line == "":
            # editors strip the lone space from empty context lines
            if not _more_body_follows(lines, idx + 1):
                break
            body.append(DiffLine(LineKind.CONTEXT, ""))
            idx += 1
            continue
        try:
            kind = LineKind(line[0])
        except ValueError:
            raise _error("invalid hunk line", idx, line) from None
        body.append(DiffLine(kind, line[1:]))
        idx += 1

    if not body:
        raise _error("hunk has no lines", header_idx, header)

    return (
        Hunk(
            old_start=int(match.group(1)),
            old_lines=old_lines,
            new_start=int(match.group(3)),
            new_lines=new_lines,
            lines=tuple(body),
            section=(match.group(5) or "").strip(),
        ),
        idx,
    )


def _counted_kind(line: str, old_left: int, new_left: int) -> LineKind | None:
    """Kind of ``line`` if it fits the hunk's remaining line counts, else None."""

    if line == "":
        return LineKind.CONTEXT if old_left and new_left else None
    if line[0] == " " and old_left and new_left:
        return LineKind.CONTEXT
    if line[0] == "-" and old_left:
        return LineKind.REMOVE
    if line[0] == "+" and new_left:
        return LineKind.ADD
    return None


def _ends_section(lines: list[str], idx: int) -> bool:
    """True if ``idx`` starts the next file section.

    A ``---``/``+++`` pair only counts when a hunk header (or the end of the
    patch) follows, so removed ``--`` lines next to added ``++`` lines stay
    in the hunk body.
    """

    line = lines[idx]
    if line.startswith("--- ") and idx + 1 < len(lines) and lines[idx + 1].startswith("+++ "):
        return idx + 2 >= len(lines) or lines[idx + 2].startswith("@@") or not lines[idx + 2].strip()
    return line.startswith(_EXTENDED_HEADERS)


def _more_body_follows(lines: list[str], idx: int) -> bool:
    """True if a blank line at ``idx - 1`` sits between two hunk body lines."""

    while idx < len(lines) and lines[idx] == "":
        idx += 1
    if idx >= len(lines) or lines[idx].startswith("@@") or _ends_section(lines, idx):
        return False
    return lines[idx][:1] in (" ", "+", "-", NO_NEWLINE_MARKER)


def _error(message: str, idx: int, line: str) -> PatchParseError:
    return PatchParseError(f"{message} (line {idx + 1}: {line!r})")


__all__ = [
    "DEV_NULL",
    "DiffLine",
    "FileDiff",
    "Hunk",
    "LineKind",
    "Patch",
    "PatchParseError",
    "normalize_path",
    "parse_patch",
]
