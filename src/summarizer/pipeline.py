"""
End-to-end summarization run.

Pipeline steps:
  Step 1: Load the input table (fatal on malformed input)
  Step 2: Select rows: first N rows, or the resume plan against the
           previous output file
  Step 3: Summarize the selected records one at a time
  Step 4: Assemble every input row in input order and write the output
           file once

The output file is written only at the end, from the fully assembled
record set.  A crash mid-run leaves the previous output untouched and the
next resume run starts from it.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from .batch import assemble_output, process_records
from .progress import ProgressReporter
from .records import load_input, load_prior_output, save_records
from .resume import plan_resume, select_rows

logger = logging.getLogger(__name__)


def run_summarization(
    input_path: Path,
    output_path: Path,
    settings: dict,
    client,
    row_limit: int | None = None,
    resume: bool = False,
    reporter: ProgressReporter | None = None,
) -> dict:
    """
    Summarize trials from ``input_path`` and write them to ``output_path``.

    Args:
        input_path: Input trial CSV.
        output_path: Output CSV; replaced when the run writes.
        settings: Dict from ``settings.load_settings()``; only ``fields``
            is read here.
        client: Object with ``generate(prompt, max_tokens, temperature)``.
        row_limit: Process at most this many rows.  Without ``resume`` these
            are the first rows of the input; with ``resume`` the first rows
            of the resume plan.
        resume: Reconcile against the existing output file and only process
            records that are missing or incomplete there.
        reporter: Progress reporter; defaults to console output.

    Returns:
        Summary dict with keys ``status`` (``'completed'`` or
        ``'nothing_to_do'``), ``total_records``, ``processed``,
        ``succeeded``, ``failed``, ``skipped``, ``duration_seconds``,
        ``avg_seconds_per_record``, ``input_tokens``, ``output_tokens``,
        ``output_path``.

    Raises:
        FormatError: Input table is malformed.
        OSError: Output file cannot be written.
    """
    reporter = reporter if reporter is not None else ProgressReporter()
    input_path, output_path = Path(input_path), Path(output_path)
    field_settings = settings["fields"]
    derived_fields = list(field_settings)
    run_start = datetime.now()

    logger.info(
        "Starting trial processing. Input: %s, Output: %s, MaxRows: %s, Resume: %s",
        input_path, output_path, row_limit, resume,
    )

    # ------------------------------------------------------------------
    # Step 1: load input
    # ------------------------------------------------------------------
    input_records = load_input(input_path, derived_fields)

    # ------------------------------------------------------------------
    # Step 2: select rows
    # ------------------------------------------------------------------
    if resume:
        logger.info("Resume mode: checking existing output file")
        prior_records = load_prior_output(output_path, derived_fields)
        to_process, carry_forward = plan_resume(input_records, prior_records, derived_fields)
        to_process = select_rows(to_process, row_limit)
    else:
        carry_forward = {}
        to_process = select_rows(input_records, row_limit)

    usage = getattr(client, "usage", {})
    summary = {
        "status": "nothing_to_do",
        "total_records": len(input_records),
        "processed": 0,
        "succeeded": 0,
        "failed": 0,
        "skipped": len(carry_forward),
        "duration_seconds": 0.0,
        "avg_seconds_per_record": 0.0,
        "input_tokens": 0,
        "output_tokens": 0,
        "output_path": str(output_path),
    }

    if not to_process:
        reporter.nothing_to_do()
        return summary

    # ------------------------------------------------------------------
    # Step 3: summarize
    # ------------------------------------------------------------------
    tokens_before = (usage.get("input_tokens", 0), usage.get("output_tokens", 0))
    reporter.start(len(to_process), input_path, output_path)
    _, counts = process_records(to_process, field_settings, client, reporter)

    # ------------------------------------------------------------------
    # Step 4: assemble and write
    # ------------------------------------------------------------------
    output_records = assemble_output(input_records, to_process, carry_forward)
    save_records(output_path, output_records, derived_fields)

    summary.update(counts)
    summary["status"] = "completed"
    summary["input_tokens"] = usage.get("input_tokens", 0) - tokens_before[0]
    summary["output_tokens"] = usage.get("output_tokens", 0) - tokens_before[1]
    summary["duration_seconds"] = round((datetime.now() - run_start).total_seconds(), 1)

    reporter.finish(summary)
    return summary
