"""Command-line entry point for a one-shot extraction invocation.

Usage:
    # Process the next batch with settings from the environment / .env
    python -m news_extractor

    # Larger batch, stricter retry ceiling
    python -m news_extractor --batch-size 5 --max-attempts 2

    # List what would be processed, without launching a browser
    python -m news_extractor --dry-run

The invocation report is printed to stdout as JSON.  Exit status is 1 when
the browser cannot be launched, the store cannot be queried, or settings are
invalid.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional, Sequence

from pydantic import ValidationError

from news_extractor.config.pipeline import PipelineConfig
from news_extractor.config.settings import get_settings
from news_extractor.core.exceptions import BrowserLaunchError, StoreError
from news_extractor.core.logging_config import configure_logging
from news_extractor.pipeline.runner import run_extraction

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="news-extractor",
        description="Extract article text for the next batch of pending work items",
    )
    parser.add_argument(
        "--batch-size",
        type=_positive_int,
        default=None,
        help="Items to process in this invocation (default: settings.batch_size)",
    )
    parser.add_argument(
        "--max-attempts",
        type=_positive_int,
        default=None,
        help="Retry ceiling per item (default: settings.max_attempts)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List pending items without launching a browser or writing",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run one invocation and print its report.  Returns the exit status."""
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as exc:
        print(f"ERROR: invalid settings: {exc}", file=sys.stderr)
        return 1

    configure_logging(settings.log_level)
    config = PipelineConfig.from_settings(settings).with_overrides(
        batch_size=args.batch_size, max_attempts=args.max_attempts
    )

    try:
        report = asyncio.run(run_extraction(settings, config, dry_run=args.dry_run))
    except (BrowserLaunchError, StoreError) as exc:
        logger.error("extractor: invocation aborted: %s", exc)
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(report, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
