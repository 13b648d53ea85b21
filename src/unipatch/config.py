"""Configuration models and enums for unipatch.

Settings resolve with the precedence CLI override > environment > config file
> defaults. The config file lives at ``<home>/config.toml``.
"""

from __future__ import annotations

import codecs
import os
import stat
import tomllib
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any, cast

from pydantic import BaseModel, ConfigDict, field_validator

from unipatch.paths import default_config_path


class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Settings(BaseModel):
    """Resolved unipatch settings."""

    model_config = ConfigDict(frozen=True, validate_default=True, extra="forbid")

    root: Path | None = None
    encoding: str = "utf-8"
    log_level: LogLevel = LogLevel.INFO
    dry_run: bool = False

    @field_validator("encoding")
    @classmethod
    def _validate_encoding(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("encoding cannot be empty")
        try:
            codecs.lookup(stripped)
        except LookupError as exc:
            raise ValueError(f"unknown encoding '{stripped}'") from exc
        return stripped

    def resolved_root(self) -> Path:
        """Return the configured root, falling back to the current directory."""

        return (self.root or Path.cwd()).expanduser().resolve()


EXPECTED_FILE_MODE = stat.S_IRUSR | stat.S_IWUSR  # 0o600

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off"}


def load_settings(
    cli_overrides: Mapping[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
    config_path: Path | str | None = None,
    *,
    create_if_missing: bool = False,
) -> Settings:
    env = env if env is not None else os.environ
    cli_overrides = cli_overrides or {}
    path = Path(config_path) if config_path else default_config_path()

    if not path.exists() and create_if_missing:
        path.parent.mkdir(parents=True, exist_ok=True)
        write_config(Settings(), path)

    config_data: dict[str, Any] = {}
    if path.exists():
        _ensure_permissions(path)
        config_data = _read_toml(path)

    defaults = Settings()

    root = _first_value(
        _clean_str(cli_overrides.get("root")),
        _clean_str(env.get("UNIPATCH_ROOT")),
        _clean_str(_get_config_value(config_data, "runtime", "root")),
    )

    encoding = _first_value(
        _clean_str(cli_overrides.get("encoding")),
        _clean_str(env.get("UNIPATCH_ENCODING")),
        _clean_str(_get_config_value(config_data, "runtime", "encoding")),
        defaults.encoding,
    )

    dry_run = _first_value(
        _coerce_bool(cli_overrides.get("dry_run")),
        _coerce_bool(env.get("UNIPATCH_DRY_RUN")),
        _coerce_bool(_get_config_value(config_data, "runtime", "dry_run")),
        defaults.dry_run,
    )

    log_level = _first_value(
        _clean_str(cli_overrides.get("log_level")),
        _clean_str(env.get("UNIPATCH_LOG_LEVEL")),
        _clean_str(_get_config_value(config_data, "logging", "log_level")),
        defaults.log_level,
    )
    log_level_enum = _coerce_enum(log_level, LogLevel, LogLevel.INFO)

    return Settings(
        root=Path(root).expanduser() if root is not None else None,
        encoding=encoding,
        log_level=cast(LogLevel, log_level_enum or LogLevel.INFO),
        dry_run=dry_run,
    )


def write_config(settings: Settings, config_path: Path | str | None = None) -> Path:
    path = Path(config_path) if config_path else default_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    sections: list[str] = []

    runtime_section: dict[str, Any] = {
        "root": str(settings.root) if settings.root is not None else None,
        "encoding": settings.encoding,
        "dry_run": settings.dry_run,
    }
    _append_section(sections, "runtime", runtime_section)
    _append_section(sections, "logging", {"log_level": settings.log_level})

    content = "\n\n".join(filter(None, sections)) + "\n"
    path.write_text(content, encoding="utf-8")
    path.chmod(EXPECTED_FILE_MODE)
    return path


def _ensure_permissions(path: Path) -> None:
    current_mode = stat.S_IMODE(path.stat().st_mode)
    if current_mode != EXPECTED_FILE_MODE:
        path.chmod(EXPECTED_FILE_MODE)


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _get_config_value(config: Mapping[str, Any], section: str, key: str) -> Any:
    section_data = config.get(section)
    if not isinstance(section_data, dict):
        return None
    return section_data.get(key)


def _clean_str(value: Any) -> Any:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else None
    return value


def _first_value(*candidates: Any) -> Any:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def _coerce_bool(value: Any) -> bool | None:
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return None


def _coerce_enum(value: Any, enum_cls: type[Enum], default: Enum | None = None) -> Enum | None:
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value)
        except ValueError:
            return default
    return default


def _append_section(parts: list[str], name: str, values: Mapping[str, Any]) -> None:
    filtered = {k: v for k, v in values.items() if v is not None}
    if not filtered:
        return
    lines = [f"[{name}]"]
    for key, val in filtered.items():
        if isinstance(val, bool):
            lines.append(f"{key} = {'true' if val else 'false'}")
        elif isinstance(val, Enum):
            lines.append(f'{key} = "{val.value}"')
        elif isinstance(val, str):
            escaped = val.replace("\\", "\\\\").replace('"', '\\"')
            lines.append(f'{key} = "{escaped}"')
        else:
            lines.append(f"{key} = {val}")
    parts.append("\n".join(lines))


__all__ = [
    "Settings",
    "LogLevel",
    "EXPECTED_FILE_MODE",
    "load_settings",
    "write_config",
]
