"""
Summarizer path constants and CSV layout.

Column layout and summary defaults come from config/summary_params.py;
this module adds the project paths used by the CLI and log setup.
"""

from pathlib import Path

from config.summary_params import (
    DERIVED_COLUMNS,
    FAILED_SUMMARY_TEXT,
    ID_COLUMN,
    SENTINEL_PREFIX,
    SOURCE_COLUMNS,
    SUMMARY_PARAMS,
    TEMPERATURE_RANGE,
)

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------

# Resolve from this file: src/summarizer/config.py → src/summarizer → src → root
PROJECT_ROOT = Path(__file__).resolve().parents[2]

CONFIG_DIR = PROJECT_ROOT / "config"
PROMPTS_DIR = CONFIG_DIR / "prompts"

# Settings file looked up in the working directory when --config is not given
DEFAULT_SETTINGS_FILE = Path("appsettings.json")

# Log files are written under the working directory, one pair per run
LOGS_DIR = Path("logs")
LOG_FILE_PREFIX = "clinical-trial-summarizer"

__all__ = [
    "CONFIG_DIR",
    "DEFAULT_SETTINGS_FILE",
    "DERIVED_COLUMNS",
    "FAILED_SUMMARY_TEXT",
    "ID_COLUMN",
    "LOGS_DIR",
    "LOG_FILE_PREFIX",
    "PROJECT_ROOT",
    "PROMPTS_DIR",
    "SENTINEL_PREFIX",
    "SOURCE_COLUMNS",
    "SUMMARY_PARAMS",
    "TEMPERATURE_RANGE",
]
