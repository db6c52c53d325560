#!/usr/bin/env python3
"""Command line entry point for Deck Watchman.

Watches a folder for PowerPoint files, converts them to PDF through a
Gotenberg server and removes files older than the retention window.
Positional arguments take priority over environment variables, which take
priority over the defaults in :class:`app.utils.config.Settings`.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import ValidationError

from app.main import DeckWatcher, configure_logging
from app.utils.config import Settings

EPILOG = """\
environment variables:
  INPUT_DIR      input folder
  OUTPUT_DIR     output folder
  GOTENBERG_URL  Gotenberg server URL
  CLEANUP_DAYS   retention window in days

examples:
  deck-watcher ./pptx ./pdf
  deck-watcher ./pptx ./pdf http://localhost:3000 14
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="deck-watcher",
        description="Convert presentations dropped into a folder to PDF via Gotenberg.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "input_dir",
        nargs="?",
        type=Path,
        help="Folder to monitor (where .pptx/.ppt files appear).",
    )
    parser.add_argument(
        "output_dir",
        nargs="?",
        type=Path,
        help="Folder receiving the PDF files.",
    )
    parser.add_argument(
        "gotenberg_url",
        nargs="?",
        help="Gotenberg server URL (default: http://localhost:3000).",
    )
    parser.add_argument(
        "cleanup_days",
        nargs="?",
        help="How many days to keep files (default: 7).",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: INFO, or LOG_LEVEL).",
    )
    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments."""

    return build_parser().parse_args(argv)


def load_settings(args: argparse.Namespace) -> Settings:
    """
    Merge CLI values over environment and defaults.

    Raises:
        ValidationError: if a value is invalid
    """
    overrides = {
        key: value
        for key, value in vars(args).items()
        if value is not None
    }
    return Settings(**overrides)


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the CLI script."""

    args = parse_args(argv)

    try:
        settings = load_settings(args)
    except ValidationError as e:
        configure_logging()
        logger.error(f"Invalid configuration:\n{e}")
        return 1

    if not settings.is_complete():
        build_parser().print_help()
        return 0

    configure_logging(settings.log_level)

    try:
        service = DeckWatcher(settings)
        return asyncio.run(service.run())
    except KeyboardInterrupt:
        logger.info("Deck watcher stopped by user")
        return 0


if __name__ == "__main__":  # pragma: no cover - CLI bridge
    sys.exit(main())
