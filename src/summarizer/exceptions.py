"""Fatal error types for the summarizer pipeline."""

from __future__ import annotations


class FormatError(ValueError):
    """The input table is malformed: missing id column, blank or duplicate ids."""


class ConfigError(ValueError):
    """A required setting (prompt template, call parameter, API key) is missing or invalid."""
