"""
Command-line entry point for the trial summarizer.

Usage (from project root):
    python -m src.summarizer trials.csv trials_summarized.csv
    python -m src.summarizer trials.csv trials_summarized.csv --rows 10
    python -m src.summarizer trials.csv trials_summarized.csv --resume
    python -m src.summarizer trials.csv out.csv --config my_settings.json --verbose

Exit status is 0 when the output was written (or nothing needed doing) and
1 on any fatal error.  Records that failed to summarize do not change the
exit status; they are counted in the summary and marked in the output.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from src.api_client import ClaudeClient

from .config import LOGS_DIR
from .logging_setup import setup_logging
from .pipeline import run_summarization
from .progress import ProgressReporter
from .settings import load_settings

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trial-summarizer",
        description="Generate AI-powered summaries for clinical trial data",
    )
    parser.add_argument("input_file", type=Path, help="Path to input CSV file")
    parser.add_argument("output_file", type=Path, help="Path for output CSV file")
    parser.add_argument(
        "--rows",
        type=_positive_int,
        default=None,
        help="Number of rows to process (default: all)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Settings file (default: ./appsettings.json if present)",
    )
    parser.add_argument(
        "--resume",
        action="store_true",
        help="Read the existing output file and only process missing or incomplete summaries",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable detailed logging")
    parser.add_argument(
        "--logs-dir",
        type=Path,
        default=LOGS_DIR,
        help=f"Directory for run log files (default: {LOGS_DIR})",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    log_paths = setup_logging(args.logs_dir, verbose=args.verbose)
    logger.info("=== CLINICAL TRIAL SUMMARIZER STARTING ===")

    try:
        if not args.input_file.exists():
            raise FileNotFoundError(f"Input file not found: {args.input_file}")

        settings = load_settings(args.config)
        with ClaudeClient(settings["api"]) as client:
            summary = run_summarization(
                args.input_file,
                args.output_file,
                settings,
                client,
                row_limit=args.rows,
                resume=args.resume,
                reporter=ProgressReporter(),
            )
    except Exception as exc:
        logger.exception("Application failed")
        print(f"Fatal error: {exc}", file=sys.stderr)
        return 1

    logger.info("=== CLINICAL TRIAL SUMMARIZER COMPLETED SUCCESSFULLY ===")
    if summary["status"] == "completed":
        logger.info("Output file: %s", args.output_file)
    logger.info("Log files saved to: %s", log_paths["text"].parent)
    return 0


if __name__ == "__main__":
    sys.exit(main())
