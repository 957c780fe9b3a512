"""
Run settings: defaults, JSON settings file, environment, prompt rendering.

Settings are resolved once at startup into a single plain dict that is
passed explicitly to every component; nothing here is cached at module
level.

Resolution order (later wins):
  1. package defaults (config/api_config.py, config/summary_params.py)
  2. prompt template files in config/prompts/<field>_template.txt
  3. the JSON settings file (``appsettings.json`` by default)
  4. ``ANTHROPIC_API_KEY`` from the environment, when the file sets no key

Settings file layout::

    {
      "ClaudeApi": {"ApiKey": "...", "Model": "...", "ApiVersion": "...",
                    "BaseUrl": "...", "TimeoutSeconds": 120, "MaxAttempts": 3},
      "SummarySettings": {
        "ShortSummary": {"Prompt": "...", "MaxTokens": 150, "Temperature": 0.3},
        "LongSummary":  {"Prompt": "...", "MaxTokens": 600, "Temperature": 0.3}
      }
    }
"""

from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Mapping
from pathlib import Path

from src.api_client.config import API_KEY_ENV, default_api_settings

from .config import (
    DEFAULT_SETTINGS_FILE,
    ID_COLUMN,
    PROMPTS_DIR,
    SOURCE_COLUMNS,
    SUMMARY_PARAMS,
    TEMPERATURE_RANGE,
)
from .exceptions import ConfigError

logger = logging.getLogger(__name__)

# ClaudeApi section key → api_settings key
_API_KEY_MAP: dict[str, str] = {
    "ApiKey": "api_key",
    "Model": "model",
    "ApiVersion": "api_version",
    "BaseUrl": "base_url",
    "TimeoutSeconds": "timeout",
    "MaxAttempts": "max_attempts",
}


def _snake_case(name: str) -> str:
    """``ShortSummary`` → ``short_summary``; already-snake names pass through."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def read_settings_file(config_path: Path | None) -> dict:
    """
    Read the JSON settings file.

    Args:
        config_path: Explicit settings path, or ``None`` to look for
            ``appsettings.json`` in the working directory.

    Returns:
        Decoded JSON object, or ``{}`` when no explicit path was given and
        the default file is absent.

    Raises:
        ConfigError: Explicit file missing, unreadable, or not a JSON object.
    """
    if config_path is None:
        if not DEFAULT_SETTINGS_FILE.exists():
            logger.info("No %s found; using built-in defaults", DEFAULT_SETTINGS_FILE)
            return {}
        config_path = DEFAULT_SETTINGS_FILE

    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Could not read configuration file {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {config_path} must contain a JSON object")

    logger.info("Configuration loaded from: %s", config_path)
    return data


def load_prompt_template(field: str, prompts_dir: Path = PROMPTS_DIR) -> str:
    """
    Load the default prompt template for a derived field.

    Args:
        field: Derived field name, e.g. ``'short_summary'``.
        prompts_dir: Directory containing ``<field>_template.txt`` files.

    Returns:
        Template text, or ``""`` if no template file exists for the field.
    """
    template_path = prompts_dir / f"{field}_template.txt"
    if not template_path.exists():
        return ""
    return template_path.read_text(encoding="utf-8")


def build_api_settings(section: Mapping, env: Mapping[str, str]) -> dict:
    """
    Merge the ``ClaudeApi`` settings section over the client defaults.

    Raises:
        ConfigError: If no API key is configured or a numeric value is invalid.
    """
    api_settings = default_api_settings()
    for file_key, settings_key in _API_KEY_MAP.items():
        if section.get(file_key) not in (None, ""):
            api_settings[settings_key] = section[file_key]

    if not api_settings["api_key"]:
        api_settings["api_key"] = env.get(API_KEY_ENV, "")
    if not api_settings["api_key"]:
        raise ConfigError(
            f"API key not found. Set ClaudeApi.ApiKey in the settings file or "
            f"the '{API_KEY_ENV}' environment variable."
        )

    try:
        api_settings["max_attempts"] = int(api_settings["max_attempts"])
        api_settings["timeout"] = float(api_settings["timeout"])
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid ClaudeApi setting: {exc}") from exc
    if api_settings["max_attempts"] < 1:
        raise ConfigError("ClaudeApi.MaxAttempts must be at least 1")

    return api_settings


def build_field_settings(
    section: Mapping,
    prompts_dir: Path = PROMPTS_DIR,
) -> dict[str, dict]:
    """
    Resolve prompt template and call parameters for every derived field.

    Fields named only in the settings file are appended after the default
    fields, in file order, and must supply all three values.

    Args:
        section: ``SummarySettings`` section of the settings file.
        prompts_dir: Directory holding default prompt templates.

    Returns:
        Ordered dict ``field → {"prompt", "max_tokens", "temperature"}``.

    Raises:
        ConfigError: Empty prompt, non-positive max_tokens, or temperature
            out of range for any field.
    """
    overrides = {_snake_case(name): values for name, values in section.items()}
    field_names = list(SUMMARY_PARAMS) + [f for f in overrides if f not in SUMMARY_PARAMS]

    low, high = TEMPERATURE_RANGE
    fields: dict[str, dict] = {}
    for field in field_names:
        defaults = SUMMARY_PARAMS.get(field, {})
        override = overrides.get(field) or {}
        if not isinstance(override, Mapping):
            raise ConfigError(f"SummarySettings entry for '{field}' must be an object")

        prompt = override.get("Prompt") or load_prompt_template(field, prompts_dir)
        if not prompt or not prompt.strip():
            raise ConfigError(f"Prompt template for '{field}' is empty or missing")

        try:
            max_tokens = int(override.get("MaxTokens", defaults.get("max_tokens", 0)))
            temperature = float(override.get("Temperature", defaults.get("temperature", -1)))
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid call parameters for '{field}': {exc}") from exc

        if max_tokens <= 0:
            raise ConfigError(f"MaxTokens for '{field}' must be a positive integer")
        if not low <= temperature <= high:
            raise ConfigError(
                f"Temperature for '{field}' must be between {low} and {high}, got {temperature}"
            )

        fields[field] = {
            "prompt": prompt,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

    return fields


def load_settings(
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
    prompts_dir: Path = PROMPTS_DIR,
) -> dict:
    """
    Resolve the complete run settings, failing fast on any gap.

    Args:
        config_path: JSON settings file; ``None`` uses ``appsettings.json``
            when present and the built-in defaults otherwise.
        env: Environment mapping (defaults to ``os.environ``).
        prompts_dir: Directory holding default prompt templates.

    Returns:
        Dict with keys ``api`` (api_settings for :class:`ClaudeClient`) and
        ``fields`` (ordered per-field prompt and call parameters).

    Raises:
        ConfigError: On a missing file, API key, or prompt template, or an
            invalid call parameter.
    """
    env = os.environ if env is None else env
    data = read_settings_file(config_path)

    fields = build_field_settings(data.get("SummarySettings") or {}, prompts_dir)
    api_settings = build_api_settings(data.get("ClaudeApi") or {}, env)

    logger.info(
        "Settings loaded: model=%s, fields=%s",
        api_settings["model"], ", ".join(fields),
    )
    return {"api": api_settings, "fields": fields}


# ---------------------------------------------------------------------------
# Prompt rendering
# ---------------------------------------------------------------------------

def render_prompt(
    template: str,
    record: Mapping[str, str],
    columns: list[str] | None = None,
) -> str:
    """
    Fill ``{column}`` placeholders in ``template`` from ``record``.

    Substitution is literal string replacement in column order; unknown
    placeholders in the template are left as they are.

    Args:
        template: Prompt template text.
        record: Record dict.
        columns: Columns available as placeholders (defaults to the id
            column plus all source columns).

    Returns:
        Rendered prompt text.
    """
    columns = [ID_COLUMN, *SOURCE_COLUMNS] if columns is None else columns
    rendered = template
    for column in columns:
        rendered = rendered.replace("{" + column + "}", record.get(column, "") or "")
    return rendered
