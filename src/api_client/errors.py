"""Exceptions raised by the API client layer."""

from __future__ import annotations


class RemoteCallError(Exception):
    """
    A call to the Messages API did not produce a usable response.

    Raised after every allowed attempt has failed.  Carries the last
    observed HTTP status (``None`` for transport faults) and the response
    body or exception text for diagnosis.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        detail: str | None = None,
        attempts: int = 0,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail
        self.attempts = attempts


class EmptySummaryError(RemoteCallError):
    """The API answered successfully but the generated text was blank."""
