"""
Per-field generation parameters and the trial CSV column layout.

This is the AUTHORITATIVE source for summary defaults.
src/summarizer/config.py imports from here: do not maintain parallel copies.

Design rationale:
- The short summary is a one-to-two sentence card blurb, so its token
  budget is small; the long summary is a paragraph for the detail page.
- A low temperature keeps reruns close to each other while still allowing
  some variation in phrasing.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# CSV layout
# ---------------------------------------------------------------------------

# Unique, stable join key across runs
ID_COLUMN: str = "nct_id"

# Carried through unchanged; also available as {placeholders} in prompts
SOURCE_COLUMNS: list[str] = [
    "brief_title",
    "brief_summary",
    "conditions",
    "interventions",
    "age",
    "genders",
]

# ---------------------------------------------------------------------------
# Derived fields (generated by the API), in generation order
# ---------------------------------------------------------------------------

SUMMARY_PARAMS: dict[str, dict[str, int | float]] = {
    "short_summary": {
        "max_tokens": 150,
        "temperature": 0.3,
    },
    "long_summary": {
        "max_tokens": 600,
        "temperature": 0.3,
    },
}

DERIVED_COLUMNS: list[str] = list(SUMMARY_PARAMS.keys())

# Temperature bounds accepted by the Messages API
TEMPERATURE_RANGE: tuple[float, float] = (0.0, 1.0)

# ---------------------------------------------------------------------------
# Failure marker
# ---------------------------------------------------------------------------

# Reserved prefix for derived values of a record that failed to generate
SENTINEL_PREFIX: str = "ERROR:"
FAILED_SUMMARY_TEXT: str = "ERROR: Failed to generate summary"
