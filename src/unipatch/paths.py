"""Common path utilities for unipatch."""

from __future__ import annotations

import os
from pathlib import Path


def get_unipatch_home() -> Path:
    """Return the base unipatch directory, honoring UNIPATCH_HOME if set."""

    env_path = os.environ.get("UNIPATCH_HOME")
    return Path(env_path).expanduser() if env_path else Path.home() / ".unipatch"


def default_config_path() -> Path:
    return get_unipatch_home() / "config.toml"


__all__ = ["get_unipatch_home", "default_config_path"]
