"""
Unit tests for src/api_client/executor.py (ClaudeClient).

HTTP is mocked at the session level and sleeps are captured, so the retry
schedule can be asserted exactly without waiting.
"""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
import requests

from src.api_client.errors import RemoteCallError
from src.api_client.executor import (
    ClaudeClient,
    build_endpoint_url,
    build_request_headers,
    build_request_payload,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _response(status: int, body=None) -> MagicMock:
    """Mock requests.Response with the given status and JSON body."""
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = body if body is not None else {}
    resp.text = json.dumps(body if body is not None else {})
    return resp


def _ok(text: str = "A short summary.", input_tokens: int = 100, output_tokens: int = 20):
    return _response(200, {
        "content": [{"type": "text", "text": text}],
        "usage": {"input_tokens": input_tokens, "output_tokens": output_tokens},
    })


def _rate_limited():
    return _response(429, {"type": "error", "error": {"type": "rate_limit_error"}})


def _make_client(settings, responses):
    """Client whose session.post yields ``responses`` in order; returns (client, session, delays)."""
    session = MagicMock()
    session.headers = {}
    session.post.side_effect = responses
    delays: list[float] = []
    client = ClaudeClient(settings["api"], session=session, sleep=delays.append)
    return client, session, delays


# ---------------------------------------------------------------------------
# Class: request construction
# ---------------------------------------------------------------------------

class TestRequestConstruction:

    def test_headers(self, settings):
        headers = build_request_headers(settings["api"])
        assert headers["x-api-key"] == "test-key"
        assert headers["anthropic-version"] == "2023-06-01"
        assert headers["content-type"] == "application/json"

    def test_empty_key_rejected(self, settings):
        with pytest.raises(ValueError):
            build_request_headers({**settings["api"], "api_key": ""})

    def test_payload_shape(self):
        payload = build_request_payload("claude-test", "Summarize this.", 150, 0.3)
        assert payload == {
            "model": "claude-test",
            "max_tokens": 150,
            "temperature": 0.3,
            "messages": [{"role": "user", "content": "Summarize this."}],
        }

    def test_endpoint_url_strips_trailing_slash(self, settings):
        api = {**settings["api"], "base_url": "https://api.example.test/"}
        assert build_endpoint_url(api) == "https://api.example.test/v1/messages"

    def test_session_headers_set_once(self, settings):
        _, session, _ = _make_client(settings, [])
        assert session.headers["x-api-key"] == "test-key"


# ---------------------------------------------------------------------------
# Class: success outcomes
# ---------------------------------------------------------------------------

class TestGenerateSuccess:

    def test_returns_first_text_block(self, settings):
        client, session, delays = _make_client(settings, [_ok("Trial tests drug X.")])
        assert client.generate("prompt", 150, 0.3) == "Trial tests drug X."
        assert session.post.call_count == 1
        assert delays == []

    def test_posts_payload_to_messages_endpoint(self, settings):
        client, session, _ = _make_client(settings, [_ok()])
        client.generate("Summarize NCT1", 150, 0.3)

        args, kwargs = session.post.call_args
        assert args[0] == "https://api.example.test/v1/messages"
        assert kwargs["json"]["messages"][0]["content"] == "Summarize NCT1"
        assert kwargs["json"]["model"] == "claude-test"
        assert kwargs["timeout"] == 5

    def test_empty_payload_returns_empty_string_without_retry(self, settings):
        client, session, delays = _make_client(settings, [_response(200, {"content": []})])
        assert client.generate("prompt", 150, 0.3) == ""
        assert session.post.call_count == 1
        assert delays == []

    def test_token_usage_accumulates(self, settings):
        client, _, _ = _make_client(settings, [_ok(input_tokens=100, output_tokens=20),
                                               _ok(input_tokens=50, output_tokens=10)])
        client.generate("a", 150, 0.3)
        client.generate("b", 150, 0.3)
        assert client.usage == {"input_tokens": 150, "output_tokens": 30, "calls": 2}

    def test_reusable_across_sequential_calls(self, settings):
        client, session, _ = _make_client(settings, [_ok("one"), _ok("two"), _ok("three")])
        results = [client.generate(p, 150, 0.3) for p in ("a", "b", "c")]
        assert results == ["one", "two", "three"]
        assert session.post.call_count == 3


# ---------------------------------------------------------------------------
# Class: retry and backoff
# ---------------------------------------------------------------------------

class TestGenerateRetry:

    def test_rate_limited_twice_then_success(self, settings):
        client, session, delays = _make_client(
            settings, [_rate_limited(), _rate_limited(), _ok("finally")]
        )
        assert client.generate("prompt", 150, 0.3) == "finally"
        assert session.post.call_count == 3
        assert delays == [1.0, 2.0]

    def test_server_error_then_success(self, settings):
        client, _, delays = _make_client(settings, [_response(500, {"error": "boom"}), _ok("ok")])
        assert client.generate("prompt", 150, 0.3) == "ok"
        assert delays == [1.0]

    def test_transport_fault_then_success(self, settings):
        client, _, delays = _make_client(
            settings, [requests.ConnectionError("connection reset"), _ok("ok")]
        )
        assert client.generate("prompt", 150, 0.3) == "ok"
        assert delays == [1.0]

    def test_timeout_then_success(self, settings):
        client, _, delays = _make_client(settings, [requests.Timeout("read timed out"), _ok("ok")])
        assert client.generate("prompt", 150, 0.3) == "ok"
        assert delays == [1.0]

    def test_undecodable_body_retried(self, settings):
        bad = _response(200)
        bad.json.side_effect = ValueError("Expecting value")
        client, session, delays = _make_client(settings, [bad, _ok("ok")])
        assert client.generate("prompt", 150, 0.3) == "ok"
        assert session.post.call_count == 2
        assert delays == [1.0]

    def test_backoff_uses_configured_base_delay(self, settings):
        api = {**settings["api"], "base_delay": 0.25}
        session = MagicMock()
        session.headers = {}
        session.post.side_effect = [_rate_limited(), _rate_limited(), _ok()]
        delays: list[float] = []
        ClaudeClient(api, session=session, sleep=delays.append).generate("p", 150, 0.3)
        assert delays == [0.25, 0.5]


# ---------------------------------------------------------------------------
# Class: exhausted retries
# ---------------------------------------------------------------------------

class TestGenerateExhausted:

    def test_rate_limited_every_attempt_raises(self, settings):
        client, session, delays = _make_client(settings, [_rate_limited()] * 3)
        with pytest.raises(RemoteCallError) as exc_info:
            client.generate("prompt", 150, 0.3)

        assert exc_info.value.status_code == 429
        assert exc_info.value.attempts == 3
        assert session.post.call_count == 3
        assert delays == [1.0, 2.0]  # no sleep after the final attempt

    def test_server_errors_raise_with_last_status_and_body(self, settings):
        client, _, _ = _make_client(settings, [
            _response(503, {"error": "overloaded"}),
            _response(500, {"error": "internal"}),
            _response(529, {"error": "last one"}),
        ])
        with pytest.raises(RemoteCallError) as exc_info:
            client.generate("prompt", 150, 0.3)

        assert exc_info.value.status_code == 529
        assert "last one" in exc_info.value.detail

    def test_transport_faults_raise_without_status(self, settings):
        client, _, delays = _make_client(settings, [requests.ConnectionError("down")] * 3)
        with pytest.raises(RemoteCallError) as exc_info:
            client.generate("prompt", 150, 0.3)

        assert exc_info.value.status_code is None
        assert "ConnectionError" in exc_info.value.detail
        assert delays == [1.0, 2.0]

    def test_single_attempt_budget_never_sleeps(self, settings):
        api = {**settings["api"], "max_attempts": 1}
        session = MagicMock()
        session.headers = {}
        session.post.side_effect = [_response(500)]
        delays: list[float] = []
        with pytest.raises(RemoteCallError):
            ClaudeClient(api, session=session, sleep=delays.append).generate("p", 150, 0.3)
        assert delays == []


class TestClientLifecycle:

    def test_context_manager_closes_session(self, settings):
        client, session, _ = _make_client(settings, [])
        with client:
            pass
        session.close.assert_called_once()
