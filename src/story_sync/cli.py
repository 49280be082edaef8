"""Command-line entrypoint: one reconciliation pass, optionally followed by watching."""

from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import TextIO

from story_sync.config import CliOverrides, SyncConfig, load_effective_config
from story_sync.license import apply_license, validate_license
from story_sync.logging.history import HistoryLog
from story_sync.scanner.models import ComponentNotFoundError
from story_sync.sync.coverage import (
    CoverageReport,
    StorySuggestion,
    component_coverage,
    suggest_stories,
)
from story_sync.sync.models import SyncOptions
from story_sync.sync.orchestrator import sync_all
from story_sync.sync.paths import PathBlockedError
from story_sync.sync.unit import sync_component
from story_sync.sync.watcher import start_watching

logger = logging.getLogger("story_sync")

LOG_FORMAT = "[story-sync] %(levelname)s %(message)s"
EXIT_USAGE_ERROR = 2


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for a sync run."""
    parser = argparse.ArgumentParser(prog="story-sync")
    parser.add_argument("--root", required=False, default=".")
    parser.add_argument("--data-dir", required=False, default=None)
    parser.add_argument("--library", required=False, default=None)
    parser.add_argument("--filter", dest="name_filter", required=False, default=None)
    parser.add_argument("--component", required=False, default=None)
    parser.add_argument("--dry-run", action="store_true")
    parser.add_argument("--no-stories", action="store_true")
    parser.add_argument("--no-tests", action="store_true")
    parser.add_argument("--no-docs", action="store_true")
    parser.add_argument("--no-update", action="store_true")
    parser.add_argument("--batch-size", type=int, required=False, default=None)
    parser.add_argument("--debounce-ms", type=int, required=False, default=None)
    parser.add_argument("--polling", action="store_true")
    parser.add_argument("--license-key", required=False, default=None)
    parser.add_argument("--watch", action="store_true")
    parser.add_argument("--history", type=int, metavar="N", required=False, default=None)
    parser.add_argument("--coverage", action="store_true")
    parser.add_argument("--suggest", type=int, metavar="N", required=False, default=None)
    parser.add_argument("--json", dest="as_json", action="store_true")
    parser.add_argument("--verbose", action="store_true")
    return parser


def configure_logging(verbose: bool, stream: TextIO | None = None) -> None:
    """Send package logs to stderr with a short prefix."""
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False


def overrides_from_args(args: argparse.Namespace) -> CliOverrides:
    """Translate parsed flags into config overrides; absent flags stay None."""
    return CliOverrides(
        data_dir=Path(args.data_dir).resolve() if args.data_dir is not None else None,
        batch_size=args.batch_size,
        stories=False if args.no_stories else None,
        tests=False if args.no_tests else None,
        docs=False if args.no_docs else None,
        update_existing=False if args.no_update else None,
        debounce_ms=args.debounce_ms,
        polling=True if args.polling else None,
        license_key=args.license_key,
    )


def options_from_config(config: SyncConfig, args: argparse.Namespace) -> SyncOptions:
    """Build pass options from the merged config plus per-run flags."""
    return SyncOptions(
        stories=config.generation.stories,
        tests=config.generation.tests,
        docs=config.generation.docs,
        update_existing=config.generation.update_existing,
        dry_run=args.dry_run,
        library=args.library,
        name_filter=args.name_filter,
        batch_size=config.batch_size,
    )


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the story-sync command."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    try:
        return run(args)
    except (ValueError, PathBlockedError, ComponentNotFoundError) as error:
        print(f"story-sync: {error}", file=sys.stderr)
        if isinstance(error, PathBlockedError):
            print(f"story-sync: {error.hint}", file=sys.stderr)
        return EXIT_USAGE_ERROR


def run(args: argparse.Namespace, out_stream: TextIO | None = None) -> int:
    """Execute one parsed invocation."""
    out = out_stream or sys.stdout
    config = load_effective_config(Path(args.root), overrides_from_args(args))
    logger.debug("Effective config: %s", json.dumps(config.to_public_dict(), sort_keys=True))
    history = HistoryLog.in_data_dir(config.data_dir) if config.history_enabled else None

    if args.history is not None:
        if history is None:
            raise ValueError("History is disabled by config field 'sync.history'.")
        for entry in history.read(limit=args.history):
            out.write(f"{json.dumps(entry, sort_keys=True)}\n")
        return 0

    if args.coverage:
        report_coverage(component_coverage(config, args.library), args.as_json, out)
        return 0
    if args.suggest is not None:
        suggestions = suggest_stories(config, args.suggest, args.library)
        report_suggestions(suggestions, args.as_json, out)
        return 0

    status = validate_license(config.license_key)
    options, warnings = apply_license(options_from_config(config, args), status)
    for warning in warnings:
        logger.warning("%s", warning)

    if args.component is not None:
        result = sync_component(config, args.component, options)
        if history is not None and not options.dry_run:
            history.record(result, "sync")
        if args.as_json:
            out.write(f"{json.dumps(result.to_dict(), sort_keys=True, indent=2)}\n")
        else:
            changed = result.changed_kinds()
            logger.info("%s: %s", result.component, ", ".join(changed) or "up to date")
        return 0

    summary = sync_all(config, options, history=history)
    if args.as_json:
        out.write(f"{json.dumps(summary.to_dict(), sort_keys=True, indent=2)}\n")
    if args.watch:
        watch_until_interrupted(config, options, history)
    return 0


def report_coverage(report: CoverageReport, as_json: bool, out: TextIO) -> None:
    """Write the coverage report as JSON or as plain lines."""
    if as_json:
        out.write(f"{json.dumps(report.to_dict(), sort_keys=True, indent=2)}\n")
        return
    out.write(
        f"Story coverage: {report.story_percent}% "
        f"({report.with_stories} of {report.total} components)\n"
    )
    for unit in report.units:
        missing = unit.missing()
        if missing:
            out.write(f"  {unit.name} ({unit.path}): missing {', '.join(missing)}\n")


def report_suggestions(suggestions: list[StorySuggestion], as_json: bool, out: TextIO) -> None:
    if as_json:
        payload = [
            {
                "component": item.component,
                "path": item.path,
                "library": item.library,
                "command": item.command,
            }
            for item in suggestions
        ]
        out.write(f"{json.dumps(payload, sort_keys=True, indent=2)}\n")
        return
    for item in suggestions:
        out.write(f"{item.component}: {item.command}\n")


def watch_until_interrupted(
    config: SyncConfig, options: SyncOptions, history: HistoryLog | None
) -> None:
    """Run the watcher until SIGINT or SIGTERM."""
    stop_requested = threading.Event()

    def _request_stop(signum: int, frame: object) -> None:
        _ = frame
        logger.info("Received signal %d, stopping", signum)
        stop_requested.set()

    previous = {
        signum: signal.signal(signum, _request_stop) for signum in (signal.SIGINT, signal.SIGTERM)
    }
    state = start_watching(config, options, history=history)
    try:
        while not stop_requested.wait(0.5):
            pass
    finally:
        state.stop()
        for signum, handler in previous.items():
            signal.signal(signum, handler)


if __name__ == "__main__":
    raise SystemExit(main())
