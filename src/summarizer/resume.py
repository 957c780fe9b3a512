"""
Completion status and resume planning.

A record's status is an explicit tag rather than a string match.  Prior
output files carry no status column, so when a previous run is read back
the status is inferred from the derived values once, here, and the rest of
the pipeline works with the tag.
"""

from __future__ import annotations

import logging

from .config import DERIVED_COLUMNS, ID_COLUMN, SENTINEL_PREFIX

logger = logging.getLogger(__name__)


class RecordStatus:
    """
    Completion states of a record.

    PENDING covers "never attempted" (a blank derived field) and FAILED
    covers "attempted and failed" (a sentinel-marked field).  Both count as
    incomplete; only SUCCEEDED is skipped on resume.
    """

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    INCOMPLETE: frozenset[str] = frozenset({PENDING, FAILED})


def infer_status(record: dict, derived_fields: list[str] = DERIVED_COLUMNS) -> str:
    """
    Infer the completion status of a record from its derived values.

    Args:
        record: Record dict.
        derived_fields: Derived field names to inspect.

    Returns:
        ``FAILED`` if any field carries the failure marker, else ``PENDING``
        if any field is blank, else ``SUCCEEDED``.
    """
    values = [(record.get(field) or "") for field in derived_fields]
    if any(value.startswith(SENTINEL_PREFIX) for value in values):
        return RecordStatus.FAILED
    if any(not value.strip() for value in values):
        return RecordStatus.PENDING
    return RecordStatus.SUCCEEDED


def is_complete(record: dict, derived_fields: list[str] = DERIVED_COLUMNS) -> bool:
    """Return ``True`` if every derived field holds a real generated value."""
    return infer_status(record, derived_fields) == RecordStatus.SUCCEEDED


def select_rows(records: list[dict], row_limit: int | None = None) -> list[dict]:
    """
    Return the first ``min(row_limit, len(records))`` records.

    Args:
        records: Records in input order.
        row_limit: Maximum rows to take; ``None`` takes all.

    Returns:
        Leading slice of ``records`` (the same dict objects, not copies).
    """
    if row_limit is None:
        return list(records)
    return records[:max(row_limit, 0)]


def plan_resume(
    input_records: list[dict],
    prior_records: list[dict] | None,
    derived_fields: list[str] = DERIVED_COLUMNS,
) -> tuple[list[dict], dict[str, dict]]:
    """
    Work out which input records still need summaries.

    For each input record, in input order:

    - absent from the prior output → process from scratch;
    - present and complete → skip, and carry the prior record forward
      verbatim for final assembly;
    - present but incomplete → copy every prior derived value onto the
      input record, then process.

    The prior records are never modified.

    Args:
        input_records: Records from the current input file (mutated in
            place when prior partial values are copied over).
        prior_records: Records from the previous output, or ``None``.
        derived_fields: Derived field names.

    Returns:
        Tuple of (to_process, carry_forward) where ``to_process`` is in
        input order and ``carry_forward`` maps id → prior record.
    """
    if prior_records is None:
        logger.info("No existing output found. Processing all trials from input.")
        return list(input_records), {}

    prior_by_id = {record[ID_COLUMN]: record for record in prior_records}
    to_process: list[dict] = []
    carry_forward: dict[str, dict] = {}

    for record in input_records:
        record_id = record[ID_COLUMN]
        prior = prior_by_id.get(record_id)

        if prior is None:
            logger.debug("Trial %s missing from output - needs processing", record_id)
            to_process.append(record)
            continue

        status = infer_status(prior, derived_fields)
        if status == RecordStatus.SUCCEEDED:
            logger.debug("Trial %s already has complete summaries - skipping", record_id)
            carry_forward[record_id] = prior
            continue

        logger.debug("Trial %s is %s - needs processing", record_id, status)
        for field in derived_fields:
            record[field] = prior.get(field, "")
        to_process.append(record)

    logger.info(
        "Resume mode: %d trials need processing out of %d total",
        len(to_process), len(input_records),
    )
    return to_process, carry_forward
