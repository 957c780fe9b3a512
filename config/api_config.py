"""
Anthropic Messages API configuration.

This is the AUTHORITATIVE source for API defaults.
src/api_client/config.py imports from here: do not maintain parallel copies.

BEFORE RUNNING THE SUMMARIZER:
1. Set ANTHROPIC_API_KEY (or provide ClaudeApi.ApiKey in the settings file).
2. Verify the model identifier is still served by the API.

ENVIRONMENT VARIABLES:
    ANTHROPIC_API_KEY  : API key used for the x-api-key header
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Endpoint and authentication
# ---------------------------------------------------------------------------

API_BASE_URL: str = "https://api.anthropic.com"
MESSAGES_PATH: str = "/v1/messages"

# Default model; override with ClaudeApi.Model in the settings file
MODEL_ID: str = "claude-sonnet-4-20250514"

# Sent as the anthropic-version header
ANTHROPIC_API_VERSION: str = "2023-06-01"

API_KEY_ENV: str = "ANTHROPIC_API_KEY"

# ---------------------------------------------------------------------------
# Retry behaviour
# ---------------------------------------------------------------------------

# Total attempts per call (initial call + retries)
MAX_ATTEMPTS: int = 3

# Delay before attempt n+1 is BASE_DELAY_SECONDS * 2 ** (n - 1)
BASE_DELAY_SECONDS: float = 1.0

# HTTP request timeout for a single attempt
REQUEST_TIMEOUT_SECONDS: int = 120

# Status code the API uses to signal rate limiting
RATE_LIMIT_STATUS: int = 429
