"""Tests for JSON extraction and schema validation."""

from __future__ import annotations

import pytest
from pydantic import BaseModel

from typed_agents.errors import ConfigurationError, InvalidOutputError
from typed_agents.jsonutil import (
    extract_json,
    to_json,
    unmarshal_validate,
    validate_json,
    validate_raw_json,
)


class Point(BaseModel):
    x: int
    y: int


POINT_SCHEMA = {
    "type": "object",
    "properties": {"x": {"type": "integer"}, "y": {"type": "integer"}},
    "required": ["x", "y"],
}


class TestExtractJson:
    """Tests for extract_json."""

    def test_plain_object(self):
        """Should return a bare JSON object unchanged."""
        assert extract_json('{"a": 1}') == '{"a": 1}'

    def test_surrounded_by_prose(self):
        """Should strip text around the object."""
        text = 'Here you go: {"a": {"b": [1, 2]}} hope it helps'
        assert extract_json(text) == '{"a": {"b": [1, 2]}}'

    def test_code_fence(self):
        """Should ignore markdown code fences."""
        text = '```json\n{"result": "ok"}\n```'
        assert extract_json(text) == '{"result": "ok"}'

    def test_first_of_two_objects(self):
        """Should return the first parseable object."""
        text = '{"first": 1} and then {"second": 2}'
        assert extract_json(text) == '{"first": 1}'

    def test_skips_unparseable_candidate(self):
        """Should move on to a later object when an earlier balanced one is not JSON."""
        text = 'use {placeholder} then {"real": true}'
        assert extract_json(text) == '{"real": true}'

    def test_no_object(self):
        """Should return an empty string when there is no object."""
        assert extract_json("not a json") == ""
        assert extract_json("[1, 2, 3]") == ""

    def test_unbalanced(self):
        """Should return an empty string for an unterminated object."""
        assert extract_json('{"a": {"b": 1}') == ""

    def test_stray_closing_brace(self):
        """Should skip a closing brace that precedes any object."""
        assert extract_json('oops } {"a": 1}') == '{"a": 1}'

    def test_long_run_of_open_braces(self):
        """Should give up on unterminated input in a single pass."""
        assert extract_json("{" * 200_000) == ""
        assert extract_json("{" * 200_000 + '{"a": 1}') == ""

    def test_rejects_non_standard_constants(self):
        """Should not accept NaN as JSON."""
        assert extract_json('{"a": NaN}') == ""

    def test_idempotent(self):
        """Should give the same result when applied to its own output."""
        text = 'noise {"a": [1, {"b": 2}]} trailing {"c": 3}'
        once = extract_json(text)
        assert extract_json(once) == once

    def test_brace_inside_string_is_a_known_limitation(self):
        """Should not find an object whose string values close its braces early."""
        assert extract_json('{"a": "}"}') == ""


class TestValidateRawJson:
    """Tests for validate_raw_json and validate_json."""

    def test_valid_payload_returned(self):
        """Should return the parsed payload when valid."""
        assert validate_raw_json('{"x": 1, "y": 2}', POINT_SCHEMA) == {"x": 1, "y": 2}

    def test_schema_violation(self):
        """Should raise InvalidOutputError listing the violations."""
        with pytest.raises(InvalidOutputError) as exc_info:
            validate_raw_json('{"x": "one"}', POINT_SCHEMA)

        assert len(exc_info.value.errors) == 2

    def test_malformed_json(self):
        """Should raise InvalidOutputError for input that is not JSON."""
        with pytest.raises(InvalidOutputError):
            validate_raw_json("{x: 1", POINT_SCHEMA)

    def test_bad_schema(self):
        """Should raise ConfigurationError for an invalid schema document."""
        with pytest.raises(ConfigurationError):
            validate_raw_json('{"x": 1}', {"type": "no-such-type"})

    def test_validate_model_instance(self):
        """Should serialize pydantic models before validating."""
        assert validate_json(Point(x=1, y=2), POINT_SCHEMA) == {"x": 1, "y": 2}


class TestUnmarshalValidate:
    """Tests for unmarshal_validate."""

    def test_decodes_into_model(self):
        """Should build the target type after validation."""
        assert unmarshal_validate('{"x": 3, "y": 4}', Point, POINT_SCHEMA) == Point(x=3, y=4)

    def test_decodes_generic_type(self):
        """Should support any type pydantic can build."""
        schema = {"type": "array", "items": {"type": "integer"}}
        assert unmarshal_validate("[1, 2, 3]", list[int], schema) == [1, 2, 3]

    def test_schema_checked_before_decoding(self):
        """Should not decode a payload that fails the schema, even if the type would accept it."""
        with pytest.raises(InvalidOutputError):
            unmarshal_validate('{"x": "3", "y": 4}', Point, POINT_SCHEMA)

    def test_type_stricter_than_schema(self):
        """Should report a type mismatch the schema let through as invalid output."""
        with pytest.raises(InvalidOutputError):
            unmarshal_validate('{"x": 1}', Point, {"type": "object"})

    def test_none_target_returns_payload(self):
        """Should return the parsed payload when no target type is given."""
        assert unmarshal_validate('{"x": 1, "y": 2}', None, POINT_SCHEMA) == {"x": 1, "y": 2}


class TestToJson:
    """Tests for to_json."""

    def test_compact_output(self):
        """Should produce compact JSON with non-ASCII kept as is."""
        assert to_json({"name": "Plutone", "city": "Zürich"}) == '{"name":"Plutone","city":"Zürich"}'

    def test_model(self):
        """Should serialize pydantic models."""
        assert to_json(Point(x=1, y=2)) == '{"x":1,"y":2}'
