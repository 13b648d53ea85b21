"""Console entrypoint for unipatch.

``unipatch apply`` applies a patch file (or stdin) to a working tree,
``unipatch check`` only parses it, and ``unipatch config`` shows where
settings come from.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from unipatch import __version__
from unipatch.config import LogLevel, Settings, load_settings
from unipatch.logging import LOG_FORMAT, _to_logging_level, configure_file_logger
from unipatch.paths import default_config_path
from unipatch.patch import ApplyResult, PatchParseError, apply_patch, classify, parse_patch


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="unipatch",
        description="Apply unified diff patches to a working tree",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show version and exit.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging on stderr.")
    parser.add_argument(
        "--log-level",
        choices=[e.value for e in LogLevel],
        dest="log_level",
        help="Log level override",
    )
    parser.add_argument("--config-path", dest="config_path", help="Path to config.toml")

    subparsers = parser.add_subparsers(dest="command", required=True)

    apply_parser = subparsers.add_parser("apply", help="Apply a patch")
    apply_parser.add_argument("patch", nargs="?", default="-", help="Patch file, or - for stdin (default)")
    apply_parser.add_argument("--root", help="Working directory the patch applies to (default: cwd)")
    apply_parser.add_argument("--encoding", help="Text encoding of patched files")
    apply_parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        dest="dry_run",
        help="Check the patch without touching any file",
    )
    apply_parser.add_argument("-R", "--reverse", action="store_true", help="Unapply the patch")
    apply_parser.add_argument("--json", action="store_true", dest="as_json", help="Print the report as JSON")
    apply_parser.add_argument(
        "--run-log",
        metavar="NAME",
        dest="run_log",
        help="Also record the run in <home>/logs/NAME.log",
    )

    check_parser = subparsers.add_parser("check", help="Parse a patch and list its files and hunks")
    check_parser.add_argument("patch", nargs="?", default="-", help="Patch file, or - for stdin (default)")

    config_parser = subparsers.add_parser("config", help="Config helpers")
    config_sub = config_parser.add_subparsers(dest="config_cmd", required=True)
    config_sub.add_parser("path", help="Print config path")
    config_sub.add_parser("print", help="Print resolved settings")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_settings(cli_overrides=_collect_overrides(args), config_path=args.config_path)
    _configure_base_logging(debug_enabled=args.debug, unipatch_level=settings.log_level)

    if args.command == "apply":
        return _run_apply(settings, args)
    if args.command == "check":
        return _run_check(args)
    if args.command == "config":
        return _run_config(settings, args)

    parser.error(f"unknown command {args.command}")
    return 1


def _run_apply(settings: Settings, args: argparse.Namespace) -> int:
    try:
        patch_text = _read_patch(args.patch)
    except OSError as exc:
        print(f"error: cannot read patch: {exc}", file=sys.stderr)
        return 1

    run_logger = configure_file_logger(args.run_log, log_level=settings.log_level) if args.run_log else None
    result = apply_patch(
        patch_text,
        settings.resolved_root(),
        dry_run=settings.dry_run,
        reverse=args.reverse,
        encoding=settings.encoding,
        logger=run_logger,
    )

    if args.as_json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        _print_report(result, dry_run=settings.dry_run)
    return 0 if result.success else 1


def _run_check(args: argparse.Namespace) -> int:
    try:
        patch = parse_patch(_read_patch(args.patch))
    except (OSError, PatchParseError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    for file_diff in patch:
        print(f"{classify(file_diff).value} {file_diff.path} ({len(file_diff.hunks)} hunks)")
    print(f"{len(patch)} files, {patch.hunk_count} hunks")
    return 0


def _run_config(settings: Settings, args: argparse.Namespace) -> int:
    if args.config_cmd == "path":
        print(Path(args.config_path) if args.config_path else default_config_path())
        return 0
    if args.config_cmd == "print":
        print(settings.model_dump_json(indent=2))
        return 0
    return 1


def _read_patch(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _print_report(result: ApplyResult, *, dry_run: bool) -> None:
    prefix = "would patch" if dry_run else "patched"
    for path in result.files_modified:
        print(f"{prefix} {path}")
    for error in result.errors:
        print(f"error: {error}", file=sys.stderr)
    print(f"{result.hunks_applied} hunks applied, {result.hunks_failed} failed")


def _collect_overrides(args: argparse.Namespace) -> dict[str, Any]:
    log_level_override = args.log_level or (LogLevel.DEBUG.value if args.debug else None)
    return {
        "root": getattr(args, "root", None),
        "encoding": getattr(args, "encoding", None),
        "dry_run": getattr(args, "dry_run", None),
        "log_level": log_level_override,
    }


def _configure_base_logging(*, debug_enabled: bool, unipatch_level: LogLevel | str) -> None:
    root_level = logging.INFO if debug_enabled else logging.WARNING

    logging.basicConfig(
        level=root_level,
        stream=sys.__stderr__,
        format=LOG_FORMAT,
        force=True,
    )

    logging.getLogger("unipatch").setLevel(_to_logging_level(unipatch_level))


if __name__ == "__main__":
    sys.exit(main())
