"""
Request construction and retried execution against the Messages API.

Design notes:
- One ``requests.Session`` is held per client so the connection pool is
  reused across the whole batch; headers are set once at construction.
- Every attempt is a fully independent, stateless call with no
  conversation history.
- Retry semantics live entirely here; callers see either text or a
  :class:`RemoteCallError`.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable

import requests

from .config import MESSAGES_PATH
from .errors import RemoteCallError
from .parser import extract_response_text, extract_token_usage
from .retry import CallOutcome, exponential_backoff, should_retry

logger = logging.getLogger(__name__)

# Longest response-body excerpt kept in logs and error messages
_DETAIL_LIMIT = 500


# ---------------------------------------------------------------------------
# Request construction
# ---------------------------------------------------------------------------

def build_request_headers(api_settings: dict) -> dict:
    """
    Construct HTTP headers for the Messages API.

    Args:
        api_settings: Dict with at least ``api_key`` and ``api_version``.

    Returns:
        Dict of HTTP header name → value pairs.

    Raises:
        ValueError: If the API key is empty.
    """
    api_key = api_settings.get("api_key")
    if not api_key:
        raise ValueError("API key is empty; cannot build request headers.")

    return {
        "x-api-key": api_key,
        "anthropic-version": api_settings["api_version"],
        "content-type": "application/json",
    }


def build_request_payload(
    model: str,
    prompt: str,
    max_tokens: int,
    temperature: float,
) -> dict:
    """
    Construct the JSON request body for a single-turn message.

    Args:
        model: Model identifier.
        prompt: Fully rendered prompt string.
        max_tokens: Upper bound on generated tokens.
        temperature: Sampling temperature.

    Returns:
        Dict suitable for the ``json=`` argument of ``Session.post()``.
    """
    return {
        "model": model,
        "max_tokens": max_tokens,
        "temperature": temperature,
        "messages": [{"role": "user", "content": prompt}],
    }


def build_endpoint_url(api_settings: dict) -> str:
    """Return the full Messages endpoint URL for ``api_settings['base_url']``."""
    return api_settings["base_url"].rstrip("/") + MESSAGES_PATH


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class ClaudeClient:
    """
    Backoff-retrying caller for the Anthropic Messages API.

    Safe to reuse for any number of sequential calls.  Token usage from
    every successful response is accumulated in :attr:`usage`.

    Args:
        api_settings: Dict built by ``settings.load_settings()`` (see
            ``API_SETTINGS_KEYS``).
        session: Optional pre-built session (tests inject a mock).
        sleep: Function used to wait between attempts.
    """

    def __init__(
        self,
        api_settings: dict,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.api_settings = api_settings
        self.url = build_endpoint_url(api_settings)
        self.max_attempts = int(api_settings["max_attempts"])
        self.base_delay = float(api_settings["base_delay"])
        self.timeout = api_settings["timeout"]
        self._sleep = sleep

        self.session = session if session is not None else requests.Session()
        self.session.headers.update(build_request_headers(api_settings))

        self.usage: dict[str, int] = {"input_tokens": 0, "output_tokens": 0, "calls": 0}

    def __enter__(self) -> ClaudeClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        self.session.close()

    def generate(self, prompt: str, max_tokens: int, temperature: float) -> str:
        """
        Generate text for ``prompt``, retrying transient failures.

        Each attempt lands in one of three outcomes (see
        :class:`~src.api_client.retry.CallOutcome`):

        - success: the first text block is returned; an empty payload
          returns ``""`` without retrying;
        - rate limited (HTTP 429): retried with backoff;
        - any other status, a transport fault, or an undecodable body:
          retried with backoff.

        Args:
            prompt: Fully rendered prompt text.
            max_tokens: Upper bound on generated tokens.
            temperature: Sampling temperature.

        Returns:
            Generated text (possibly empty).

        Raises:
            RemoteCallError: After ``max_attempts`` attempts have failed.
        """
        payload = build_request_payload(
            self.api_settings["model"], prompt, max_tokens, temperature
        )
        logger.debug("POST %s\n%s", self.url, json.dumps(payload, indent=2))

        last_status: int | None = None
        last_detail = ""

        for attempt in range(1, self.max_attempts + 1):
            logger.debug("Sending request (attempt %d/%d)", attempt, self.max_attempts)
            try:
                response = self.session.post(self.url, json=payload, timeout=self.timeout)
            except requests.RequestException as exc:
                outcome = CallOutcome.FAILED
                last_status, last_detail = None, f"{type(exc).__name__}: {exc}"
                logger.warning(
                    "Attempt %d/%d failed [transport]: %s",
                    attempt, self.max_attempts, last_detail,
                )
            else:
                outcome = CallOutcome.from_status(response.status_code)
                last_status = response.status_code

                if outcome == CallOutcome.SUCCESS:
                    try:
                        body = response.json()
                        text = extract_response_text(body)
                    except ValueError as exc:
                        outcome = CallOutcome.FAILED
                        last_detail = f"Undecodable response body: {exc}"
                        logger.warning(
                            "Attempt %d/%d failed [invalid_response]: %s",
                            attempt, self.max_attempts, last_detail,
                        )
                    else:
                        self._record_usage(body)
                        logger.debug("Response body:\n%s", response.text)
                        if not text:
                            logger.warning("Received empty response from the API")
                        return text
                else:
                    last_detail = response.text[:_DETAIL_LIMIT]
                    if outcome == CallOutcome.RATE_LIMITED:
                        logger.warning(
                            "Attempt %d/%d rate limited (HTTP %d)",
                            attempt, self.max_attempts, last_status,
                        )
                    else:
                        logger.error(
                            "Attempt %d/%d failed (HTTP %d): %s",
                            attempt, self.max_attempts, last_status, last_detail,
                        )

            if not should_retry(outcome, attempt, self.max_attempts):
                break

            delay = exponential_backoff(attempt, self.base_delay)
            logger.info("Retrying in %.1fs", delay)
            self._sleep(delay)

        status_text = f"HTTP {last_status}" if last_status is not None else "no response"
        raise RemoteCallError(
            f"API request failed after {self.max_attempts} attempts "
            f"({status_text}): {last_detail[:_DETAIL_LIMIT]}",
            status_code=last_status,
            detail=last_detail,
            attempts=self.max_attempts,
        )

    def _record_usage(self, body: dict) -> None:
        tokens = extract_token_usage(body)
        self.usage["input_tokens"] += tokens["input_tokens"]
        self.usage["output_tokens"] += tokens["output_tokens"]
        self.usage["calls"] += 1
        logger.info(
            "Token usage - input: %d, output: %d",
            tokens["input_tokens"], tokens["output_tokens"],
        )
