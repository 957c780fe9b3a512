"""
Per-run log files.

Each run writes two timestamped files under the logs directory:

  clinical-trial-summarizer-YYYYmmdd_HHMMSS.log  : human-readable text
  clinical-trial-summarizer-YYYYmmdd_HHMMSS.json : one JSON object per line

Warnings and errors are echoed to stderr (everything when verbose) so the
console stays readable next to the progress output.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path

from pythonjsonlogger import jsonlogger

from .config import LOG_FILE_PREFIX, LOGS_DIR

TEXT_FORMAT = "[%(asctime)s %(levelname)s] %(name)s: %(message)s"
CONSOLE_FORMAT = "[%(asctime)s %(levelname).3s] %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class RunJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that always includes level, logger, and source function."""

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["function"] = record.funcName


def setup_logging(
    logs_dir: Path = LOGS_DIR,
    verbose: bool = False,
    logger_name: str = "src",
) -> dict[str, Path]:
    """
    Attach text, JSON and console handlers to the package logger.

    Handlers previously attached by this function are replaced, so calling
    it twice in one process (as tests do) does not duplicate output.

    Args:
        logs_dir: Directory for the log files (created if missing).
        verbose: Log at DEBUG instead of INFO and echo everything to stderr.
        logger_name: Logger to configure; the package root by default.

    Returns:
        Dict with keys ``text`` and ``json`` giving the log file paths.
    """
    logs_dir = Path(logs_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)

    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    text_path = logs_dir / f"{LOG_FILE_PREFIX}-{stamp}.log"
    json_path = logs_dir / f"{LOG_FILE_PREFIX}-{stamp}.json"

    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        if getattr(handler, "_summarizer_handler", False):
            logger.removeHandler(handler)
            handler.close()

    text_handler = logging.FileHandler(text_path, encoding="utf-8")
    text_handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    json_handler = logging.FileHandler(json_path, encoding="utf-8")
    json_handler.setFormatter(RunJsonFormatter(JSON_FORMAT))

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))

    for handler in (text_handler, json_handler, console_handler):
        handler._summarizer_handler = True
        logger.addHandler(handler)

    logger.info("Log level: %s", logging.getLevelName(level))
    logger.info("File logging: %s", text_path)
    logger.info("JSON logging: %s", json_path)
    return {"text": text_path, "json": json_path}
