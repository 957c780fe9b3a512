"""
Per-record summarization, failure isolation, and final assembly.

Execution order:
- Records are processed sequentially, in the order given.
- Within a record, derived fields are generated one at a time in
  settings order, one API call each.
- A record either succeeds completely or is marked failed in every
  derived field; partial results are not kept mid-run.
- A failed record never stops the batch.  There is no retry at this
  layer beyond what the client already does; the next resume run picks
  failed records up again.
"""

from __future__ import annotations

import logging
import time

from src.api_client.errors import EmptySummaryError

from .config import FAILED_SUMMARY_TEXT, ID_COLUMN
from .progress import ProgressReporter
from .resume import RecordStatus
from .settings import render_prompt

logger = logging.getLogger(__name__)


def summarize_record(record: dict, field_settings: dict[str, dict], client) -> None:
    """
    Generate every derived field of ``record`` in place.

    Args:
        record: Record dict (mutated).
        field_settings: Ordered ``field → {"prompt", "max_tokens",
            "temperature"}`` from ``settings.load_settings()``.
        client: Object with ``generate(prompt, max_tokens, temperature)``.

    Raises:
        EmptySummaryError: The API returned blank text for a field.
        RemoteCallError: The client exhausted its retries.
    """
    record_id = record[ID_COLUMN]
    logger.info("=== PROCESSING TRIAL %s ===", record_id)
    logger.info("Trial title: %s", record.get("brief_title", ""))

    for field, params in field_settings.items():
        prompt = render_prompt(params["prompt"], record)
        logger.debug("Trial %s: generating %s\n%s", record_id, field, prompt)

        text = client.generate(prompt, params["max_tokens"], params["temperature"])
        if not text or not text.strip():
            raise EmptySummaryError(f"API returned an empty {field} for {record_id}")

        record[field] = text

    logger.debug("Successfully processed trial %s", record_id)


def mark_failed(record: dict, derived_fields: list[str]) -> None:
    """Overwrite every derived field of ``record`` with the failure marker."""
    for field in derived_fields:
        record[field] = FAILED_SUMMARY_TEXT


def process_records(
    to_process: list[dict],
    field_settings: dict[str, dict],
    client,
    reporter: ProgressReporter | None = None,
) -> tuple[dict[str, str], dict]:
    """
    Summarize each record, isolating per-record failures.

    Each record moves PENDING → SUCCEEDED or PENDING → FAILED.  Any
    exception raised while summarizing one record is logged, every derived
    field of that record is set to the failure marker, and processing
    moves on to the next record.

    Args:
        to_process: Records to summarize (mutated in place).
        field_settings: Per-field prompt and call parameters.
        client: Object with ``generate(prompt, max_tokens, temperature)``.
        reporter: Progress reporter; ``None`` reports nothing.

    Returns:
        Tuple of (statuses, counts) where ``statuses`` maps id → status and
        ``counts`` has keys ``processed``, ``succeeded``, ``failed``,
        ``duration_seconds`` and ``avg_seconds_per_record``.
    """
    derived_fields = list(field_settings)
    statuses = {record[ID_COLUMN]: RecordStatus.PENDING for record in to_process}
    succeeded = failed = 0

    batch_start = time.monotonic()
    for position, record in enumerate(to_process, start=1):
        record_id = record[ID_COLUMN]
        record_start = time.monotonic()
        error: str | None = None

        try:
            summarize_record(record, field_settings, client)
        except Exception as exc:
            logger.exception("Trial %s failed", record_id)
            mark_failed(record, derived_fields)
            statuses[record_id] = RecordStatus.FAILED
            error = str(exc)
            failed += 1
        else:
            statuses[record_id] = RecordStatus.SUCCEEDED
            succeeded += 1

        if reporter is not None:
            reporter.record_done(
                position,
                record_id,
                statuses[record_id],
                time.monotonic() - record_start,
                error=error,
            )

    duration = time.monotonic() - batch_start
    processed = len(to_process)
    counts = {
        "processed": processed,
        "succeeded": succeeded,
        "failed": failed,
        "duration_seconds": round(duration, 1),
        "avg_seconds_per_record": round(duration / processed, 2) if processed else 0.0,
    }
    return statuses, counts


def assemble_output(
    input_records: list[dict],
    processed: list[dict],
    carry_forward: dict[str, dict],
) -> list[dict]:
    """
    Build the output rows in input order, one per input id.

    For each input record: the processed version if it was handled this
    run, else the carried-forward prior record, else the input record as
    read.

    Args:
        input_records: All records from the input file, in order.
        processed: Records handled this run.
        carry_forward: id → prior record for records skipped as complete.

    Returns:
        Output rows.
    """
    processed_by_id = {record[ID_COLUMN]: record for record in processed}
    output: list[dict] = []
    for record in input_records:
        record_id = record[ID_COLUMN]
        if record_id in processed_by_id:
            output.append(processed_by_id[record_id])
        elif record_id in carry_forward:
            output.append(carry_forward[record_id])
        else:
            output.append(record)
    return output
