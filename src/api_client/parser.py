"""
Response parsing for the Anthropic Messages API.

No I/O occurs here; all functions are pure transformations of the decoded
JSON body to support easy unit testing.
"""

from __future__ import annotations


def extract_response_text(response_json: dict) -> str:
    """
    Extract the first text block from a Messages API response.

    Expected payload::

        {"content": [{"type": "text", "text": "..."}], "usage": {...}}

    A structurally empty payload (no ``content`` key, an empty ``content``
    list, or a null ``text``) yields an empty string rather than an error;
    deciding whether an empty summary is acceptable is the caller's job.

    Args:
        response_json: Raw JSON-decoded response body.

    Returns:
        Extracted text, or ``""`` when the payload carries none.

    Raises:
        ValueError: If the body is not a JSON object or ``content`` is not a list.
    """
    if not isinstance(response_json, dict):
        raise ValueError(
            f"Unrecognized API response: expected a JSON object, "
            f"got {type(response_json).__name__}"
        )

    content = response_json.get("content")
    if content is None:
        return ""
    if not isinstance(content, list):
        raise ValueError(
            f"Unrecognized API response: 'content' is {type(content).__name__}, "
            "expected a list"
        )
    if not content:
        return ""

    first = content[0]
    if not isinstance(first, dict):
        return ""
    return first.get("text") or ""


def extract_token_usage(response_json: dict) -> dict[str, int]:
    """
    Read token accounting from a Messages API response.

    Args:
        response_json: Raw JSON-decoded response body.

    Returns:
        Dict with integer keys ``input_tokens`` and ``output_tokens``
        (0 when the response omits usage).
    """
    usage = response_json.get("usage") or {}
    return {
        "input_tokens": int(usage.get("input_tokens") or 0),
        "output_tokens": int(usage.get("output_tokens") or 0),
    }
