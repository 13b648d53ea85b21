import pytest

from unipatch.patch.applier import (
    HunkMismatchError,
    apply_hunk,
    apply_hunks,
    join_lines,
    split_lines,
    start_index,
)
from unipatch.patch.parser import DiffLine, Hunk, LineKind


def _hunk(old_start: int, old_lines: int, new_start: int, new_lines: int, *body: str) -> Hunk:
    return Hunk(
        old_start=old_start,
        old_lines=old_lines,
        new_start=new_start,
        new_lines=new_lines,
        lines=tuple(DiffLine(LineKind(line[0]), line[1:]) for line in body),
    )


def test_apply_hunk_replaces_line() -> None:
    lines = ["line 1", "line 2", "line 3"]
    hunk = _hunk(1, 3, 1, 3, " line 1", "-line 2", "+line 2 modified", " line 3")

    result = apply_hunk(lines, hunk)

    assert result.lines == ["line 1", "line 2 modified", "line 3"]
    assert result.delta == 0
    assert lines == ["line 1", "line 2", "line 3"]


def test_apply_hunk_delta_counts_adds_minus_removes() -> None:
    hunk = _hunk(2, 1, 2, 3, "-b", "+b1", "+b2", "+b3")
    result = apply_hunk(["a", "b", "c"], hunk)
    assert result.lines == ["a", "b1", "b2", "b3", "c"]
    assert result.delta == 2


def test_apply_hunk_uses_offset() -> None:
    hunk = _hunk(2, 1, 2, 1, "-x", "+y")
    result = apply_hunk(["new", "a", "x", "b"], hunk, offset=1)
    assert result.lines == ["new", "a", "y", "b"]


def test_context_mismatch_reports_line_and_texts() -> None:
    hunk = _hunk(1, 2, 1, 2, " first", "-second", "+SECOND")

    with pytest.raises(HunkMismatchError) as excinfo:
        apply_hunk(["first", "other"], hunk)

    err = excinfo.value
    assert err.line_number == 2
    assert err.expected == "second"
    assert err.actual == "other"
    assert "expected 'second', found 'other'" in str(err)


def test_no_trailing_whitespace_tolerance() -> None:
    with pytest.raises(HunkMismatchError):
        apply_hunk(["value "], _hunk(1, 1, 1, 1, "-value", "+other"))


def test_reading_past_end_of_file_fails() -> None:
    with pytest.raises(HunkMismatchError, match="end of file"):
        apply_hunk(["only"], _hunk(1, 2, 1, 2, " only", "-missing", "+x"))


def test_start_beyond_file_fails() -> None:
    with pytest.raises(HunkMismatchError, match="file has 1 lines"):
        apply_hunk(["hi"], _hunk(10, 1, 10, 1, "-hi", "+bye"))


def test_pure_insertion_anchors_after_old_start() -> None:
    hunk = _hunk(2, 0, 3, 1, "+inserted")
    assert start_index(hunk, 0) == 2
    assert apply_hunk(["a", "b", "c"], hunk).lines == ["a", "b", "inserted", "c"]


def test_insertion_into_empty_file() -> None:
    result = apply_hunk([], _hunk(0, 0, 1, 2, "+one", "+two"))
    assert result.lines == ["one", "two"]


def test_apply_hunks_threads_offset_across_growing_and_shrinking_hunks() -> None:
    lines = [f"l{i}" for i in range(1, 11)]
    hunks = [
        _hunk(1, 1, 1, 3, "-l1", "+a", "+b", "+c"),
        _hunk(5, 2, 7, 1, "-l5", "-l6", "+m"),
        _hunk(9, 1, 10, 1, "-l9", "+n"),
    ]

    outcome = apply_hunks(lines, hunks)

    assert outcome.failures == []
    assert outcome.applied == 3
    assert outcome.lines == ["a", "b", "c", "l2", "l3", "l4", "m", "l7", "l8", "n", "l10"]


def test_apply_hunks_skips_failed_hunk_and_keeps_going() -> None:
    lines = ["a", "b", "c", "d"]
    hunks = [
        _hunk(1, 1, 1, 2, "-a", "+a1", "+a2"),
        _hunk(2, 1, 3, 1, "-nope", "+x"),
        _hunk(4, 1, 5, 1, "-d", "+D"),
    ]

    outcome = apply_hunks(lines, hunks)

    assert outcome.applied == 2
    assert [f.index for f in outcome.failures] == [2]
    assert outcome.lines == ["a1", "a2", "b", "c", "D"]


@pytest.mark.parametrize(
    ("text", "lines", "trailing"),
    [
        ("", [], True),
        ("a\n", ["a"], True),
        ("a", ["a"], False),
        ("a\n\n", ["a", ""], True),
        ("a\r\nb\r\n", ["a\r", "b\r"], True),
    ],
)
def test_split_lines(text: str, lines: list[str], trailing: bool) -> None:
    assert split_lines(text) == (lines, trailing)
    assert join_lines(lines, trailing) == text
