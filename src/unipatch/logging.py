"""Logging setup for unipatch.

Library code logs through module loggers under the ``unipatch`` namespace.
Callers that want a persistent record of runs can attach a file logger that
writes to ``<home>/logs/<name>.log``; it is isolated (no propagation) and
avoids duplicate handlers across repeated initializations.
"""

from __future__ import annotations

import logging
from pathlib import Path

from unipatch.config import LogLevel
from unipatch.paths import get_unipatch_home

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def log_file_path(name: str, base_dir: Path | None = None) -> Path:
    directory = base_dir if base_dir is not None else get_unipatch_home() / "logs"
    return directory / f"{name}.log"


def configure_file_logger(
    name: str,
    *,
    log_level: LogLevel | str = LogLevel.INFO,
    base_dir: Path | None = None,
) -> logging.Logger:
    """Configure and return a file logger named ``unipatch.run.<name>``.

    Subsequent calls with the same name return the same logger without
    duplicating handlers.
    """

    logger = logging.getLogger(f"unipatch.run.{name}")

    level_value = _to_logging_level(log_level)
    logger.setLevel(level_value)
    logger.propagate = False

    if not logger.handlers:
        path = log_file_path(name, base_dir)
        path.parent.mkdir(parents=True, exist_ok=True)

        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setLevel(level_value)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger


def _to_logging_level(value: LogLevel | str) -> int:
    mapping = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
    }
    if isinstance(value, LogLevel):
        return mapping[value]
    if isinstance(value, str):
        try:
            return mapping[LogLevel(value)]
        except ValueError:
            return logging.WARNING
    return logging.WARNING


__all__ = [
    "LOG_FORMAT",
    "configure_file_logger",
    "log_file_path",
    "_to_logging_level",
]
