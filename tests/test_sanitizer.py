"""
Tests for isolating JSON from raw model text.
"""

import pytest

from compliance_pipeline.errors import MalformedModelOutput
from compliance_pipeline.sanitizer import parse_payload, sanitize_response


class TestSanitizeResponse:
    """Tests for sanitize_response()."""

    def test_strips_json_code_fence(self):
        assert sanitize_response('```json\n{"a":1}\n```') == '{"a":1}'

    def test_bare_object_unchanged(self):
        assert sanitize_response('  {"a": [1, 2]}  ') == '{"a": [1, 2]}'

    def test_plain_fence(self):
        assert sanitize_response('```\n{"a":1}\n```') == '{"a":1}'

    def test_surrounding_prose(self):
        raw = 'Here is the analysis:\n{"role": "risk-analyzer"}\nLet me know if you need more.'
        assert sanitize_response(raw) == '{"role": "risk-analyzer"}'

    def test_bold_wrapping(self):
        assert sanitize_response('**{"a":1}**') == '{"a":1}'

    def test_inline_code_wrapping(self):
        assert sanitize_response('`{"a":1}`') == '{"a":1}'

    def test_nested_objects_kept_whole(self):
        raw = 'Result: {"a": {"b": {"c": 1}}} done'
        assert sanitize_response(raw) == '{"a": {"b": {"c": 1}}}'

    def test_no_object_found(self):
        with pytest.raises(MalformedModelOutput) as exc:
            sanitize_response("I cannot analyse this text.")
        assert "No JSON object" in exc.value.message
        assert exc.value.retryable

    def test_broken_json_not_repaired(self):
        """Trailing commas and similar damage are reported, never fixed."""
        with pytest.raises(MalformedModelOutput):
            sanitize_response('{"a": 1,}')

    def test_empty_input(self):
        with pytest.raises(MalformedModelOutput):
            sanitize_response("")

    def test_keeps_raw_preview(self):
        with pytest.raises(MalformedModelOutput) as exc:
            sanitize_response("no json here")
        assert exc.value.raw_preview == "no json here"


class TestParsePayload:
    """Tests for parse_payload()."""

    def test_returns_dict(self):
        assert parse_payload('```json\n{"a":1}\n```') == {"a": 1}

    def test_top_level_array_rejected(self):
        # the {...} span of an array of objects is not itself valid JSON
        with pytest.raises(MalformedModelOutput):
            parse_payload('[{"a":1}, {"b":2}]')
