"""
src/api_client: Messages API access for the trial summarizer.

Module layout
-------------
config.py   : endpoint, model, auth and retry defaults; api_settings builder
parser.py   : response text and token-usage extraction
retry.py    : outcome classification, exponential backoff, retry decisions
executor.py : request construction and the retrying ClaudeClient
errors.py   : RemoteCallError, EmptySummaryError

Public interface
----------------
Generate text with retries:
    with ClaudeClient(api_settings) as client:
        text = client.generate(prompt, max_tokens, temperature)
"""

from .config import default_api_settings
from .errors import EmptySummaryError, RemoteCallError
from .executor import ClaudeClient
from .retry import CallOutcome, exponential_backoff

__all__ = [
    "ClaudeClient",
    "default_api_settings",
    # Errors
    "RemoteCallError",
    "EmptySummaryError",
    # Retry helpers
    "CallOutcome",
    "exponential_backoff",
]
