"""CLI/bootstrap helpers for the PubMed browser application."""

from __future__ import annotations

import argparse
import asyncio
import logging
import logging.handlers
import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, TextIO

from pubmed_browser.action_messages import build_saved_status
from pubmed_browser.config import (
    AppSettings,
    JsonKeyValueStore,
    get_config_dir,
    load_settings,
)
from pubmed_browser.controller import SearchController
from pubmed_browser.models import SORT_OPTIONS, Record
from pubmed_browser.query import coerce_days_back, coerce_sort
from pubmed_browser.saved import SavedStore

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool) -> None:
    """Configure logging. When debug=True, logs to file at DEBUG level."""
    if not debug:
        # Default: suppress all logging (TUI captures stderr)
        logging.disable(logging.CRITICAL)
        return

    log_dir = get_config_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "debug.log"

    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(logging.DEBUG)


def _configure_color_mode(color_mode: str) -> None:
    """Configure environment hints for terminal color behavior."""
    if color_mode == "never":
        os.environ["NO_COLOR"] = "1"
        os.environ.pop("FORCE_COLOR", None)
        return
    if color_mode == "always":
        os.environ["FORCE_COLOR"] = "1"
        os.environ.pop("NO_COLOR", None)
        return
    # auto
    os.environ.pop("FORCE_COLOR", None)


def _validate_interactive_tty() -> bool:
    """Return True when stdin/stdout are interactive terminals."""
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def format_record_plain(record: Record, index: int | None = None) -> str:
    """Render a record as a plain-text block for non-interactive output."""
    prefix = f"{index}. " if index is not None else ""
    return "\n".join(
        [
            f"{prefix}{record.title}",
            f"   Authors: {record.authors}",
            f"   {record.journal} / {record.year}",
            f"   {record.url}",
        ]
    )


def _print_records(records: list[Record], out: TextIO) -> None:
    for i, record in enumerate(records, start=1):
        print(format_record_plain(record, i), file=out)


def _run_print_mode(controller: SearchController, args: argparse.Namespace) -> int:
    """Run one search and print the results. Returns exit code."""
    outcome = asyncio.run(controller.search(args.query, args.days, args.sort))
    if outcome.kind == "error":
        print(f"Error: {outcome.status}", file=sys.stderr)
        return 1
    print(outcome.status)
    _print_records(outcome.records, sys.stdout)
    return 0


def _list_saved(saved: SavedStore) -> int:
    print(build_saved_status(len(saved)))
    _print_records(list(saved.records), sys.stdout)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Search PubMed and bookmark papers in a TUI")
    parser.add_argument(
        "-q",
        "--query",
        type=str,
        default=None,
        help="Search term to run on startup",
    )
    parser.add_argument(
        "--days",
        type=str,
        default=None,
        help="Lookback window in days (default: last used, 365 initially)",
    )
    parser.add_argument(
        "--sort",
        choices=list(SORT_OPTIONS),
        default=None,
        help="Result ordering (default: last used, pub+date initially)",
    )
    parser.add_argument(
        "--print",
        dest="print_only",
        action="store_true",
        help="Print results of --query to stdout instead of opening the TUI",
    )
    parser.add_argument(
        "--list-saved",
        action="store_true",
        help="Print saved papers and exit",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to file (~/.config/pubmed-browser/debug.log)",
    )
    parser.add_argument(
        "--color",
        choices=["auto", "always", "never"],
        default="auto",
        help="Color output mode for terminal UI (default: auto)",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable terminal colors (equivalent to --color never)",
    )
    return parser


def main(
    argv: list[str] | None = None,
    *,
    load_settings_fn: Callable[[], AppSettings] = load_settings,
    saved_store_factory: Callable[[], SavedStore] | None = None,
    configure_logging_fn: Callable[[bool], None] = _configure_logging,
    configure_color_mode_fn: Callable[[str], None] = _configure_color_mode,
    validate_interactive_tty_fn: Callable[[], bool] = _validate_interactive_tty,
    app_factory: Callable[..., Any] | None = None,
) -> int:
    """Main entry point. Returns exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.print_only and not (args.query or "").strip():
        print("Error: --print requires a non-empty --query", file=sys.stderr)
        return 1

    color_mode = "never" if args.no_color else args.color
    configure_color_mode_fn(color_mode)
    configure_logging_fn(args.debug)
    logger.debug("pubmed-browser starting, cwd=%s", Path.cwd())

    settings = load_settings_fn()
    if args.days is None:
        args.days = settings.days_back
    if args.sort is None:
        args.sort = settings.sort

    if saved_store_factory is None:
        saved = SavedStore(JsonKeyValueStore())
    else:
        saved = saved_store_factory()
    saved.load_all()

    if args.list_saved:
        return _list_saved(saved)

    if args.print_only:
        return _run_print_mode(SearchController(saved, settings), args)

    if not validate_interactive_tty_fn():
        print(
            "Error: pubmed-browser requires an interactive TTY for the full UI.",
            file=sys.stderr,
        )
        print("Next steps:", file=sys.stderr)
        print("  - Run pubmed-browser directly in a terminal session", file=sys.stderr)
        print("  - Use --query TERM --print for non-interactive output", file=sys.stderr)
        print("  - Use --list-saved to print saved papers", file=sys.stderr)
        return 2

    if app_factory is None:
        from pubmed_browser.app import PubMedBrowser as _PubMedBrowser

        app_factory = _PubMedBrowser

    settings.days_back = coerce_days_back(args.days)
    settings.sort = coerce_sort(args.sort)
    app = app_factory(
        settings=settings,
        saved=saved,
        initial_query=args.query or "",
    )
    app.run()
    return 0


__all__ = [
    "_configure_color_mode",
    "_configure_logging",
    "_validate_interactive_tty",
    "build_parser",
    "format_record_plain",
    "main",
]
