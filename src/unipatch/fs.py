"""Filesystem boundary and working-tree access for patch application."""

from __future__ import annotations

import errno
import os
import shutil
from pathlib import Path


class FsViolationError(Exception):
    """Raised when a path escapes the allowed filesystem boundary."""


class FsBoundary:
    """Confine patch targets to a root directory."""

    def __init__(self, root: Path | str | None = None) -> None:
        self.root: Path = Path(root or Path.cwd()).resolve()

    def sanitize_path(self, raw_path: str | Path) -> Path:
        """Return an absolute, normalized path inside the root.

        Relative paths are joined to the root; symlinks are followed before
        the containment check so a link cannot smuggle writes outside.
        """

        path = Path(raw_path)
        if not path.is_absolute():
            path = self.root / path
        resolved = path.resolve(strict=False)

        if not self._is_within(resolved):
            raise FsViolationError(f"Access denied: {raw_path} is outside work directory")
        return resolved

    def _is_within(self, path: Path) -> bool:
        """Return True if ``path`` is inside the boundary. Assumes ``path`` is already resolved."""

        try:
            path.relative_to(self.root)
            return True
        except ValueError:
            return False


class WorkingTree:
    """Read and mutate files on disk."""

    dry_run = False

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def exists(self, path: Path) -> bool:
        return path.exists()

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def read_text(self, path: Path) -> str:
        # newline="" keeps CRLF intact so patch lines compare byte-for-byte
        with path.open("r", encoding=self.encoding, newline="") as handle:
            return handle.read()

    def write_text(self, path: Path, content: str) -> None:
        # encode first so an unencodable write leaves nothing behind
        data = content.encode(self.encoding)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    def delete(self, path: Path) -> None:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()


class SimulatedTree(WorkingTree):
    """Working tree that stages writes and deletes in memory.

    Reads fall through to disk unless an earlier operation in the same run
    staged a change for that path, so a dry run sees the same sequence of
    states as a real run without touching the filesystem.
    """

    dry_run = True

    def __init__(self, encoding: str = "utf-8") -> None:
        super().__init__(encoding)
        self._written: dict[Path, str] = {}
        self._deleted: set[Path] = set()

    def exists(self, path: Path) -> bool:
        if path in self._written:
            return True
        if self._is_deleted(path):
            return False
        return path.exists()

    def is_dir(self, path: Path) -> bool:
        if path in self._written or self._is_deleted(path):
            return False
        return path.is_dir()

    def read_text(self, path: Path) -> str:
        if path in self._written:
            return self._written[path]
        if self._is_deleted(path):
            raise FileNotFoundError(f"No such file or directory: '{path}'")
        return super().read_text(path)

    def write_text(self, path: Path, content: str) -> None:
        content.encode(self.encoding)
        self._check_parents(path)
        self._deleted.discard(path)
        self._written[path] = content

    def delete(self, path: Path) -> None:
        for staged in [p for p in self._written if p == path or path in p.parents]:
            del self._written[staged]
        self._deleted.add(path)

    def _is_deleted(self, path: Path) -> bool:
        return any(gone == path or gone in path.parents for gone in self._deleted)

    def _check_parents(self, path: Path) -> None:
        """Raise the error a real ``mkdir(parents=True)`` would for ``path.parent``."""

        for parent in reversed(path.parents):
            if self.exists(parent) and not self.is_dir(parent):
                code = errno.EEXIST if parent == path.parent else errno.ENOTDIR
                exc_type = FileExistsError if code == errno.EEXIST else NotADirectoryError
                raise exc_type(code, os.strerror(code), str(parent))


__all__ = ["FsBoundary", "FsViolationError", "WorkingTree", "SimulatedTree"]
