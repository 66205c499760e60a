#!/usr/bin/env python3
"""
Command-line entry points.

`image-batch-analyzer` takes no flags; everything is configured through the
environment (or a .env file). `image-batch-extract` gathers descriptions out of
saved result files.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from .config import Settings
from .core.exceptions import AnalyzerError
from .core.extractor import extract_descriptions
from .core.processor import build_processor
from .ui.rich_ui import print_extraction_summary
from .utils.log_utils import configure_logging, get_logger

logger = get_logger(__name__)
console = Console()


def _fatal(message: str) -> int:
    console.print(f"[bold red]Fatal error:[/bold red] {escape(message)}")
    return 1


def run() -> int:
    """Run one batch from environment configuration; return the process exit code."""
    try:
        settings = Settings()
    except ValidationError as err:
        configure_logging()
        return _fatal(f"Invalid configuration: {err}")

    configure_logging(settings.log_level)
    logger.info("Starting batch image processing...")
    try:
        processor = build_processor(settings, console=console)
        asyncio.run(processor.run())
    except AnalyzerError as err:
        return _fatal(str(err))
    return 0


def main() -> None:
    sys.exit(run())


def parse_extract_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Extract image descriptions from a directory of batch result files."
    )
    parser.add_argument(
        "--results-dir",
        type=Path,
        default=Path("./results"),
        help="Directory containing result JSON files (default: ./results)",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=Path("./extracts/descriptions.json"),
        help="Output file for the description list (default: ./extracts/descriptions.json)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        default="info",
        help="Set logging level (default: info)",
    )
    return parser.parse_args(argv)


def extract(argv=None) -> int:
    args = parse_extract_args(argv)
    configure_logging(args.log_level.upper())
    logger.info("Starting description extraction...")
    try:
        report = extract_descriptions(args.results_dir, args.output)
    except AnalyzerError as err:
        return _fatal(str(err))
    if report.output_file is not None:
        print_extraction_summary(console, report)
    return 0


def extract_main() -> None:
    sys.exit(extract())


if __name__ == "__main__":
    main()
