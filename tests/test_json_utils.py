"""
Unit tests for JSON extraction from LLM output and provider bodies.
"""

import pytest

from edumagic.gateway.errors import InvalidResponse
from edumagic.gateway.json_utils import (
    JSONExtractionError,
    extract_json_text,
    parse_json_body,
    parse_json_object,
)


class TestExtractJsonText:

    def test_clean_object_passes_through(self):
        assert extract_json_text('{"a": 1}') == '{"a": 1}'

    def test_prose_around_object_is_dropped(self):
        text = 'Here is your lesson: {"a": {"b": 1}} Enjoy!'
        assert extract_json_text(text) == '{"a": {"b": 1}}'

    def test_markdown_fences_are_stripped(self):
        text = '```json\n{"steps": []}\n```'
        assert extract_json_text(text) == '{"steps": []}'

    def test_fences_without_object(self):
        assert extract_json_text("```json\n[1, 2]\n```") == "[1, 2]"

    def test_empty_input_rejected(self):
        with pytest.raises(JSONExtractionError):
            extract_json_text("")


class TestParseJsonObject:

    def test_parses_wrapped_object(self):
        assert parse_json_object('Sure!\n```json\n{"title": "x"}\n```') == {"title": "x"}

    def test_invalid_json_is_invalid_response(self):
        with pytest.raises(InvalidResponse) as exc:
            parse_json_object("{not json}")
        assert "invalid content format" in str(exc.value)

    def test_array_is_rejected(self):
        with pytest.raises(JSONExtractionError):
            parse_json_object("[1, 2, 3]")


class TestParseJsonBody:

    def test_empty_body_is_empty_dict(self):
        assert parse_json_body("  ", "chatgpt-42") == {}

    def test_bytes_are_decoded(self):
        assert parse_json_body(b'{"url": "https://x/y.png"}', "p") == {"url": "https://x/y.png"}

    def test_html_error_page(self):
        with pytest.raises(InvalidResponse) as exc:
            parse_json_body("<html>502 Bad Gateway</html>", "midjourney-imaginecraft")
        assert exc.value.provider == "midjourney-imaginecraft"
