"""
Console progress and outcome reporting for a summarization run.

The reporter only consumes events; it never changes what the pipeline
does.  Output goes to stdout with ``print`` and a matching line to the
run log.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .resume import RecordStatus

logger = logging.getLogger(__name__)

_SEP = "=" * 60
_BAR_WIDTH = 30


def progress_bar(done: int, total: int, width: int = _BAR_WIDTH) -> str:
    """Render ``[#####-----]`` for ``done`` of ``total``."""
    if total <= 0:
        return "[" + "-" * width + "]"
    filled = min(width, round(width * done / total))
    return "[" + "#" * filled + "-" * (width - filled) + "]"


class ProgressReporter:
    """
    Prints a header, one line per record, and a closing summary.

    Args:
        quiet: Suppress console output (log lines are still written).
    """

    def __init__(self, quiet: bool = False) -> None:
        self.quiet = quiet
        self.total = 0

    def _print(self, text: str = "") -> None:
        if not self.quiet:
            print(text, flush=True)

    def start(self, total: int, input_path: Path, output_path: Path) -> None:
        """Announce a batch of ``total`` records."""
        self.total = total
        self._print(f"\n{_SEP}")
        self._print("CLINICAL TRIAL SUMMARIZER")
        self._print(f"  Input file:  {Path(input_path).name}")
        self._print(f"  Output file: {Path(output_path).name}")
        self._print(f"  Processing:  {total:,} rows")
        self._print(f"{_SEP}\n")
        logger.info("Starting batch of %d rows", total)

    def record_done(
        self,
        position: int,
        record_id: str,
        status: str,
        elapsed_seconds: float,
        error: str | None = None,
    ) -> None:
        """Report the outcome of the ``position``-th record (1-based)."""
        pct = position / self.total * 100 if self.total else 100.0
        label = "SUCCESS" if status == RecordStatus.SUCCEEDED else "FAILED"
        self._print(
            f"{progress_bar(position, self.total)} {pct:5.1f}%  "
            f"[{position}/{self.total}] {record_id}: {label} ({elapsed_seconds:.1f}s)"
        )
        if error:
            self._print(f"    Error: {error[:200]}")
            logger.error(
                "Processed row %d/%d: %s - %s (%.1fs): %s",
                position, self.total, record_id, label, elapsed_seconds, error,
            )
        else:
            logger.info(
                "Processed row %d/%d: %s - %s (%.1fs)",
                position, self.total, record_id, label, elapsed_seconds,
            )

    def nothing_to_do(self) -> None:
        """Announce that every record is already complete."""
        message = "No trials need processing. All summaries are complete."
        self._print(message)
        logger.info(message)

    def finish(self, summary: dict) -> None:
        """Print the closing summary produced by the orchestrator."""
        self._print(f"\n{_SEP}")
        self._print("BATCH COMPLETE")
        self._print(f"  Processed: {summary['processed']:,}")
        self._print(f"  Succeeded: {summary['succeeded']:,}")
        self._print(f"  Failed:    {summary['failed']:,}")
        self._print(f"  Skipped:   {summary.get('skipped', 0):,}")
        self._print(f"  Duration:  {summary['duration_seconds'] / 60:.1f} min")
        self._print(f"  Avg/row:   {summary['avg_seconds_per_record']:.1f}s")
        if "input_tokens" in summary:
            self._print(
                f"  Tokens:    {summary['input_tokens']:,} in / "
                f"{summary['output_tokens']:,} out"
            )
        self._print(f"{_SEP}\n")
        logger.info(
            "Batch complete: %d processed, %d succeeded, %d failed in %.1fs",
            summary["processed"], summary["succeeded"], summary["failed"],
            summary["duration_seconds"],
        )
