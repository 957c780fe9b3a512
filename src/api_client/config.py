"""
API client constants.

Defaults are defined once in config/api_config.py and re-exported here so
the client modules have a single local import point.  Per-run values
(API key, model override, timeouts) arrive in the ``api_settings`` dict
built by src/summarizer/settings.py.
"""

from config.api_config import (
    ANTHROPIC_API_VERSION,
    API_BASE_URL,
    API_KEY_ENV,
    BASE_DELAY_SECONDS,
    MAX_ATTEMPTS,
    MESSAGES_PATH,
    MODEL_ID,
    RATE_LIMIT_STATUS,
    REQUEST_TIMEOUT_SECONDS,
)

# Keys every api_settings dict carries after settings.load_settings()
API_SETTINGS_KEYS: tuple[str, ...] = (
    "api_key",
    "model",
    "api_version",
    "base_url",
    "timeout",
    "max_attempts",
    "base_delay",
)


def default_api_settings(api_key: str = "") -> dict:
    """
    Build an ``api_settings`` dict populated with the package defaults.

    Args:
        api_key: Anthropic API key to embed.

    Returns:
        Dict with every key in ``API_SETTINGS_KEYS``.
    """
    return {
        "api_key": api_key,
        "model": MODEL_ID,
        "api_version": ANTHROPIC_API_VERSION,
        "base_url": API_BASE_URL,
        "timeout": REQUEST_TIMEOUT_SECONDS,
        "max_attempts": MAX_ATTEMPTS,
        "base_delay": BASE_DELAY_SECONDS,
    }


__all__ = [
    "ANTHROPIC_API_VERSION",
    "API_BASE_URL",
    "API_KEY_ENV",
    "API_SETTINGS_KEYS",
    "BASE_DELAY_SECONDS",
    "MAX_ATTEMPTS",
    "MESSAGES_PATH",
    "MODEL_ID",
    "RATE_LIMIT_STATUS",
    "REQUEST_TIMEOUT_SECONDS",
    "default_api_settings",
]
