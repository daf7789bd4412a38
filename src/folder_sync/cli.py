"""Command-line entry point for folder-sync.

Keeps a replica directory identical to a source directory, re-checking
every N seconds until interrupted.
"""

import argparse
import json
import sys
from typing import TextIO

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from . import __version__
from .config import SyncOptions, load_config
from .config_loader import (
    discover_config_files,
    ensure_config,
    load_hierarchical_config,
)
from .config_schema import UnifiedConfig, build_config, to_fallbacks
from .logger import SyncLog, setup_logging
from .runner import SyncRunner
from .sync import (
    ChangeDetector,
    TreeReconciler,
    format_cycle_report,
    report_to_json,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="folder-sync",
        description="One-way periodic synchronization of a replica folder with a source folder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Mirror /data into /backup every 60 seconds, logging to sync.log
  folder-sync /data /backup sync.log 60

  # Log into a directory (uses folder-sync.log inside it)
  folder-sync /data /backup /var/log/ 300

  # Run a single cycle and print what would change
  folder-sync /data /backup sync.log 60 --once --dry-run

  # Take everything from .folder_sync/config.yml or FOLDER_SYNC_* env vars
  folder-sync

Stop with Ctrl+C.
        """,
    )

    parser.add_argument("source", nargs="?", help="Source folder path")
    parser.add_argument("replica", nargs="?", help="Replica folder path")
    parser.add_argument(
        "log_file",
        nargs="?",
        help="Log file path, or a directory to hold folder-sync.log",
    )
    parser.add_argument(
        "interval", nargs="?", type=int, help="Synchronization interval in seconds"
    )
    parser.add_argument(
        "--retry-delay",
        type=int,
        help=(
            "Seconds to wait after a failed cycle "
            "(default: 5, capped at the interval)"
        ),
    )
    parser.add_argument(
        "--hash-algorithm",
        help="hashlib algorithm used to compare file contents (default: sha256)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single cycle, print its report and exit",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report operations without changing the replica",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="With --once, print the cycle report as JSON",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        help="Log line format (default: text)",
    )
    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Write a starter .folder_sync/config.yml and exit",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"folder-sync version {__version__}",
    )
    return parser


def _load_unified_config() -> UnifiedConfig:
    raw = load_hierarchical_config()
    return build_config(raw)


def resolve_options(
    args: argparse.Namespace,
) -> tuple[SyncOptions, UnifiedConfig]:
    """Merge CLI args, env vars/.env and YAML config into ``SyncOptions``.

    Raises:
        ValueError: If the configuration is incomplete or invalid.
    """
    load_dotenv()

    try:
        unified = _load_unified_config()
    except (ValidationError, yaml.YAMLError) as exc:
        raise ValueError(f"Invalid config file: {exc}") from None

    options = load_config(
        source=args.source,
        replica=args.replica,
        log_file=args.log_file,
        interval=args.interval,
        retry_delay=args.retry_delay,
        hash_algorithm=args.hash_algorithm,
        debug=args.debug,
        yaml_fallbacks=to_fallbacks(unified),
    )
    return options, unified


def _print_settings(options: SyncOptions, stream: TextIO) -> None:
    print(f"Source Path: {options.source}", file=stream)
    print(f"Replica Path: {options.replica}", file=stream)
    print(f"Log File Path: {options.log_file}", file=stream)
    print(f"Interval (seconds): {options.interval_seconds}", file=stream)
    config_files = discover_config_files()
    if config_files:
        print(f"Config File: {config_files[0]}", file=stream)


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return the process exit status."""
    args = build_parser().parse_args(argv)

    if args.init_config:
        path = ensure_config()
        print(f"Config file: {path}")
        return 0

    try:
        options, unified = resolve_options(args)
    except ValueError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    # stdout carries only the report in --json mode
    _print_settings(options, sys.stderr if args.json else sys.stdout)

    log_format = args.log_format or unified.logging.format
    try:
        setup_logging(
            options.log_file,
            debug=options.debug,
            debug_format=log_format,
            level=unified.logging.level,
        )
    except OSError as exc:
        print(f"Cannot open log file: {exc}", file=sys.stderr)
        return 2

    recorder = SyncLog()
    reconciler = TreeReconciler(
        recorder=recorder,
        detector=ChangeDetector(options.hash_algorithm),
    )
    runner = SyncRunner(
        reconciler, options, recorder, dry_run=args.dry_run
    )

    try:
        runner.initialize()
    except (OSError, ValueError) as exc:
        print(f"Initialization failed: {exc}")
        return 1

    if args.once:
        report = runner.run_cycle()
        if report is None:
            return 1
        if args.json:
            print(json.dumps(report_to_json(report), indent=2))
        else:
            print(format_cycle_report(report))
        return 0

    recorder.record("Folder sync started")
    print("Press Ctrl+C to stop synchronization")
    runner.run_forever()
    return 0


def run() -> None:
    """Console-script entry point; handles interruption gracefully."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    run()
