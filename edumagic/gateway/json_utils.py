"""
JSON extraction and parsing utilities for provider responses.

PROBLEM
-------
Even in JSON mode, LLMs sometimes wrap the object in prose or markdown:
    "Here is your lesson: ```json {"introduction": ...} ``` Enjoy!"

SOLUTION
--------
1. Take the outermost {...} span (first '{' through last '}').
2. If there is no such span, strip code fences and trim.
3. Parse, and insist on a JSON object at the top level.
"""
import json
import re
from typing import Any, Dict, Union

from .errors import InvalidResponse


class JSONExtractionError(InvalidResponse):
    """Raised when no valid JSON object can be extracted."""
    pass


_OBJECT_SPAN = re.compile(r"\{[\s\S]*\}")
_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


def extract_json_text(text: str) -> str:
    """
    Extract the candidate JSON text from an LLM response.

    Examples:
        >>> extract_json_text('Lesson: {"a": {"b": 1}} Done!')
        '{"a": {"b": 1}}'

        >>> extract_json_text('```json\\n[1, 2]\\n```')
        '[1, 2]'
    """
    if not text or not isinstance(text, str):
        raise JSONExtractionError("Input text is empty or not a string")

    match = _OBJECT_SPAN.search(text)
    if match:
        return match.group(0)

    return _FENCE.sub("", text).strip()


def parse_json_object(text: str) -> Dict[str, Any]:
    """
    Parse a JSON object out of raw LLM text.

    Raises:
        JSONExtractionError: Empty input, invalid JSON or non-object JSON
    """
    candidate = extract_json_text(text)

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise JSONExtractionError(
            f"AI produced invalid content format: {e}. "
            f"Extracted: {candidate[:100]}"
        ) from e

    if not isinstance(parsed, dict):
        raise JSONExtractionError(
            f"Expected JSON object (dict), got {type(parsed).__name__}"
        )

    return parsed


def parse_json_body(raw: Union[str, bytes], provider: str) -> Any:
    """
    Parse an HTTP response body as JSON.

    An empty body parses to an empty dict.

    Raises:
        InvalidResponse: Body is not valid JSON
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidResponse(
            f"Invalid JSON response from {provider}: {raw[:100]}",
            provider=provider,
            body=raw[:200],
        ) from e
