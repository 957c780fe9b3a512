"""
Trial CSV loading and saving.

Records are plain ``dict[str, str]`` rows in input order.  Every value is
read as a string with empty cells kept as ``""`` (pandas would otherwise
turn them into NaN).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pandas as pd

from .config import DERIVED_COLUMNS, ID_COLUMN, SOURCE_COLUMNS
from .exceptions import FormatError

logger = logging.getLogger(__name__)


def output_columns(derived_fields: list[str] = DERIVED_COLUMNS) -> list[str]:
    """Column order of every written table: id, source fields, derived fields."""
    return [ID_COLUMN, *SOURCE_COLUMNS, *derived_fields]


def _read_table(path: Path) -> pd.DataFrame:
    return pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8")


def _frame_to_records(
    df: pd.DataFrame,
    derived_fields: list[str],
    source: Path,
) -> list[dict]:
    """
    Validate ids and normalize ``df`` to the known column layout.

    Raises:
        FormatError: Id column missing, or any id blank or duplicated.
    """
    if ID_COLUMN not in df.columns:
        raise FormatError(f"Required column '{ID_COLUMN}' not found in {source}")

    ids = df[ID_COLUMN].str.strip()
    # +2: header row, 1-based line numbers
    blank_rows = [int(i) + 2 for i, value in ids.items() if value == ""]
    if blank_rows:
        raise FormatError(f"Blank '{ID_COLUMN}' in {source} at line(s) {blank_rows[:10]}")

    duplicated = sorted(ids[ids.duplicated()].unique())
    if duplicated:
        raise FormatError(f"Duplicate '{ID_COLUMN}' values in {source}: {duplicated[:10]}")

    missing = [c for c in SOURCE_COLUMNS if c not in df.columns]
    if missing:
        logger.warning("Columns missing from %s, treated as empty: %s", source, missing)

    df = df.assign(**{ID_COLUMN: ids}).reindex(
        columns=output_columns(derived_fields), fill_value=""
    )
    return df.to_dict(orient="records")


def load_input(path: Path, derived_fields: list[str] = DERIVED_COLUMNS) -> list[dict]:
    """
    Read the input trial table.

    Unknown columns are ignored; known source or derived columns that are
    absent read as empty strings.

    Args:
        path: Input CSV path.
        derived_fields: Derived field names to carry on each record.

    Returns:
        Records in file order.

    Raises:
        FormatError: File missing or unparseable, id column absent, or ids
            blank or duplicated.
    """
    path = Path(path)
    if not path.exists():
        raise FormatError(f"Input file not found: {path}")

    logger.info("Reading CSV file: %s", path)
    try:
        df = _read_table(path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise FormatError(f"Could not parse input file {path}: {exc}") from exc

    records = _frame_to_records(df, derived_fields, path)
    logger.info("Successfully read %d trial records", len(records))
    return records


def load_prior_output(
    path: Path,
    derived_fields: list[str] = DERIVED_COLUMNS,
) -> list[dict] | None:
    """
    Read a previous run's output table for resume planning.

    Never fatal: a missing or unreadable file means "no prior output".

    Args:
        path: Output CSV path of the earlier run.
        derived_fields: Derived field names to carry on each record.

    Returns:
        Records in file order, or ``None`` if the file is absent or invalid.
    """
    path = Path(path)
    if not path.exists():
        logger.info("Output file does not exist: %s", path)
        return None

    logger.info("Reading existing output file: %s", path)
    try:
        records = _frame_to_records(_read_table(path), derived_fields, path)
    except Exception as exc:
        logger.warning(
            "Failed to read existing output file %s (%s). Will process from scratch.",
            path, exc,
        )
        return None

    logger.info("Successfully read %d existing trial records", len(records))
    return records


def save_records(
    path: Path,
    records: list[dict],
    derived_fields: list[str] = DERIVED_COLUMNS,
) -> None:
    """
    Write the full record set, replacing any file already at ``path``.

    The table is written to a sibling temporary file first and moved into
    place, so an interrupted write leaves the previous output intact.
    Every column in :func:`output_columns` is always written.

    Args:
        path: Output CSV path.
        records: Records in the order they should appear.
        derived_fields: Derived field names to write.

    Raises:
        OSError: If the file cannot be written.
    """
    path = Path(path)
    columns = output_columns(derived_fields)
    logger.info("Writing %d trial records to: %s", len(records), path)

    path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(records, columns=columns).fillna("")

    tmp_path = path.with_name(path.name + ".tmp")
    try:
        df.to_csv(tmp_path, index=False, encoding="utf-8")
        os.replace(tmp_path, path)
    except OSError:
        logger.exception("Failed to write CSV file: %s", path)
        if tmp_path.is_file():
            tmp_path.unlink()
        raise

    logger.info("Successfully wrote CSV file: %s", path)
