"""
Shared pytest fixtures for the summarizer tests.

Prompts in ``field_settings`` wrap the trial id in square brackets so a
fake client can tell which trial a call belongs to without ``NCT001``
accidentally matching ``NCT0010``.
"""

from __future__ import annotations

import pandas as pd
import pytest

from src.api_client.errors import RemoteCallError
from src.summarizer.config import ID_COLUMN, SOURCE_COLUMNS
from src.summarizer.progress import ProgressReporter


# ---------------------------------------------------------------------------
# Record builders
# ---------------------------------------------------------------------------

def make_trial(
    nct_id: str = "NCT00000001",
    short_summary: str = "",
    long_summary: str = "",
    **overrides: str,
) -> dict:
    """Build a full trial record with every known column populated."""
    record = {ID_COLUMN: nct_id}
    for column in SOURCE_COLUMNS:
        record[column] = f"{column} of {nct_id}"
    record["short_summary"] = short_summary
    record["long_summary"] = long_summary
    record.update(overrides)
    return record


def make_trials(n: int) -> list[dict]:
    """Build ``n`` trials with ids NCT00000001 … NCT0000000n."""
    return [make_trial(f"NCT{i:08d}") for i in range(1, n + 1)]


def write_trials_csv(path, records: list[dict], columns: list[str] | None = None) -> None:
    """Write ``records`` to ``path`` as CSV (optionally restricted to ``columns``)."""
    df = pd.DataFrame(records)
    if columns is not None:
        df = df[columns]
    df.to_csv(path, index=False)


def read_csv(path) -> pd.DataFrame:
    """Read a CSV keeping empty cells as empty strings."""
    return pd.read_csv(path, dtype=str, keep_default_na=False)


# ---------------------------------------------------------------------------
# Fake remote caller
# ---------------------------------------------------------------------------

class FakeClient:
    """
    Stand-in for ClaudeClient.

    Returns ``"generated: <prompt>"`` for every call, except for trials
    listed in ``fail_ids`` (raises RemoteCallError) or ``empty_ids``
    (returns ``""``).
    """

    def __init__(self, fail_ids=(), empty_ids=()):
        self.fail_ids = set(fail_ids)
        self.empty_ids = set(empty_ids)
        self.calls: list[tuple[str, int, float]] = []
        self.usage = {"input_tokens": 0, "output_tokens": 0, "calls": 0}

    def called_ids(self) -> list[str]:
        """Trial ids in call order (one entry per call)."""
        return [prompt.split("[", 1)[1].split("]", 1)[0] for prompt, _, _ in self.calls]

    def generate(self, prompt: str, max_tokens: int, temperature: float) -> str:
        self.calls.append((prompt, max_tokens, temperature))
        if any(f"[{trial_id}]" in prompt for trial_id in self.fail_ids):
            raise RemoteCallError("API request failed after 3 attempts (HTTP 500)", 500)
        if any(f"[{trial_id}]" in prompt for trial_id in self.empty_ids):
            return ""
        self.usage["input_tokens"] += 10
        self.usage["output_tokens"] += 5
        self.usage["calls"] += 1
        return f"generated: {prompt}"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def field_settings():
    """Two derived fields with short, id-tagged prompts."""
    return {
        "short_summary": {
            "prompt": "short [{nct_id}] {brief_title}",
            "max_tokens": 150,
            "temperature": 0.3,
        },
        "long_summary": {
            "prompt": "long [{nct_id}] {brief_summary}",
            "max_tokens": 600,
            "temperature": 0.5,
        },
    }


@pytest.fixture
def settings(field_settings):
    """Complete settings dict as returned by load_settings()."""
    return {
        "api": {
            "api_key": "test-key",
            "model": "claude-test",
            "api_version": "2023-06-01",
            "base_url": "https://api.example.test",
            "timeout": 5,
            "max_attempts": 3,
            "base_delay": 1.0,
        },
        "fields": field_settings,
    }


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def quiet_reporter():
    return ProgressReporter(quiet=True)
