import pathlib
import shutil
import sys
from collections.abc import Callable
from typing import Any

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"

# Ensure src/ is importable when running tests without installing the package.
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from unipatch.fs import FsBoundary  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_unipatch_home(monkeypatch: pytest.MonkeyPatch):
    """Point UNIPATCH_HOME at a repo-local sandbox so we never touch the real FS."""

    home = PROJECT_ROOT / ".work"
    if home.exists():
        shutil.rmtree(home, ignore_errors=True)
    home.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("UNIPATCH_HOME", str(home))
    for var in ("UNIPATCH_ROOT", "UNIPATCH_ENCODING", "UNIPATCH_LOG_LEVEL", "UNIPATCH_DRY_RUN"):
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def boundary(tmp_path: pathlib.Path) -> FsBoundary:
    """FsBoundary rooted in a temporary sandbox."""

    return FsBoundary(tmp_path)


@pytest.fixture
def snapshot_tree(tmp_path: pathlib.Path) -> Callable[[], dict[str, Any]]:
    """Return a callable capturing every file under tmp_path as bytes."""

    def _snapshot() -> dict[str, Any]:
        return {
            path.relative_to(tmp_path).as_posix(): path.read_bytes()
            for path in sorted(tmp_path.rglob("*"))
            if path.is_file()
        }

    return _snapshot


class FakeLogger:
    """Lightweight in-memory fake logger that records calls."""

    def __init__(self, name: str = "fake") -> None:
        self.name = name
        self.info_calls: list[tuple[tuple[Any, ...], dict[str, Any]]] = []
        self.debug_calls: list[tuple[tuple[Any, ...], dict[str, Any]]] = []
        self.warning_calls: list[tuple[tuple[Any, ...], dict[str, Any]]] = []
        self.error_calls: list[tuple[tuple[Any, ...], dict[str, Any]]] = []

    def info(self, *args: Any, **kwargs: Any) -> None:
        self.info_calls.append((args, kwargs))

    def debug(self, *args: Any, **kwargs: Any) -> None:
        self.debug_calls.append((args, kwargs))

    def warning(self, *args: Any, **kwargs: Any) -> None:
        self.warning_calls.append((args, kwargs))

    def error(self, *args: Any, **kwargs: Any) -> None:
        self.error_calls.append((args, kwargs))


@pytest.fixture
def fake_logger() -> type[FakeLogger]:
    """Provide FakeLogger class for injecting into the engine."""
    return FakeLogger
