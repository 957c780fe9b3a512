"""
Unit tests for src/api_client/retry.py and src/api_client/parser.py.

Covers outcome classification, the doubling backoff schedule, retry
decisions, and extraction of text and token usage from response bodies.
"""

from __future__ import annotations

import pytest

from src.api_client.parser import extract_response_text, extract_token_usage
from src.api_client.retry import CallOutcome, exponential_backoff, should_retry


# ---------------------------------------------------------------------------
# Class: CallOutcome.from_status
# ---------------------------------------------------------------------------

class TestCallOutcome:
    """Every status lands in exactly one of three outcomes."""

    @pytest.mark.parametrize("status", [200, 201, 299])
    def test_2xx_is_success(self, status):
        assert CallOutcome.from_status(status) == CallOutcome.SUCCESS

    def test_429_is_rate_limited(self):
        assert CallOutcome.from_status(429) == CallOutcome.RATE_LIMITED

    @pytest.mark.parametrize("status", [400, 401, 404, 500, 503, 529])
    def test_other_status_is_failed(self, status):
        assert CallOutcome.from_status(status) == CallOutcome.FAILED


# ---------------------------------------------------------------------------
# Class: exponential_backoff
# ---------------------------------------------------------------------------

class TestExponentialBackoff:
    """Delay after attempt n is base * 2 ** (n - 1)."""

    def test_default_schedule(self):
        assert [exponential_backoff(n) for n in (1, 2, 3, 4)] == [1.0, 2.0, 4.0, 8.0]

    def test_custom_base(self):
        assert exponential_backoff(3, base_delay=0.5) == 2.0

    def test_attempt_zero_rejected(self):
        with pytest.raises(ValueError):
            exponential_backoff(0)


# ---------------------------------------------------------------------------
# Class: should_retry
# ---------------------------------------------------------------------------

class TestShouldRetry:

    def test_success_never_retried(self):
        assert should_retry(CallOutcome.SUCCESS, 1, 3) is False

    @pytest.mark.parametrize("outcome", [CallOutcome.RATE_LIMITED, CallOutcome.FAILED])
    def test_failures_retried_while_attempts_remain(self, outcome):
        assert should_retry(outcome, 1, 3) is True
        assert should_retry(outcome, 2, 3) is True

    @pytest.mark.parametrize("outcome", [CallOutcome.RATE_LIMITED, CallOutcome.FAILED])
    def test_no_retry_after_last_attempt(self, outcome):
        assert should_retry(outcome, 3, 3) is False

    def test_single_attempt_budget(self):
        assert should_retry(CallOutcome.FAILED, 1, 1) is False


# ---------------------------------------------------------------------------
# Class: response parsing
# ---------------------------------------------------------------------------

class TestExtractResponseText:

    def test_first_text_block_returned(self):
        body = {"content": [{"type": "text", "text": "first"}, {"type": "text", "text": "second"}]}
        assert extract_response_text(body) == "first"

    def test_empty_content_list_is_empty_string(self):
        assert extract_response_text({"content": []}) == ""

    def test_missing_content_is_empty_string(self):
        assert extract_response_text({"id": "msg_1"}) == ""

    def test_null_text_is_empty_string(self):
        assert extract_response_text({"content": [{"type": "text", "text": None}]}) == ""

    def test_non_object_body_rejected(self):
        with pytest.raises(ValueError):
            extract_response_text(["not", "an", "object"])

    def test_non_list_content_rejected(self):
        with pytest.raises(ValueError):
            extract_response_text({"content": "text"})


class TestExtractTokenUsage:

    def test_usage_read(self):
        body = {"usage": {"input_tokens": 120, "output_tokens": 45}}
        assert extract_token_usage(body) == {"input_tokens": 120, "output_tokens": 45}

    def test_missing_usage_is_zero(self):
        assert extract_token_usage({}) == {"input_tokens": 0, "output_tokens": 0}
