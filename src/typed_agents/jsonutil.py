"""JSON helpers for coercing free-form model replies into typed values."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import Any, Mapping

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError
from jsonschema.validators import validator_for
from pydantic import TypeAdapter, ValidationError
from pydantic_core import to_jsonable_python

from .errors import ConfigurationError, InvalidOutputError

logger = logging.getLogger(__name__)


def _reject_constant(name: str) -> Any:
    # NaN / Infinity are not JSON.
    raise ValueError(f"invalid JSON constant {name}")


def _loads(data: str | bytes) -> Any:
    return json.loads(data, parse_constant=_reject_constant)


def _is_json(candidate: str) -> bool:
    try:
        _loads(candidate)
    except ValueError:
        return False
    return True


def extract_json(text: str) -> str:
    """Return the first brace-balanced substring of ``text`` that parses as JSON.

    Braces are counted without regard to string literals, so a ``{`` or ``}``
    inside a JSON string can hide an otherwise valid object. The text is
    scanned once: when a balanced candidate does not parse, the next top-level
    ``{`` starts a new one, and stray ``}`` outside any candidate are skipped.
    Returns an empty string when nothing qualifies.
    """
    depth = 0
    start = 0
    for i, ch in enumerate(text):
        if ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                candidate = text[start : i + 1]
                if _is_json(candidate):
                    return candidate
    return ""


def to_json(value: Any) -> str:
    """Serialize ``value`` (pydantic models, dataclasses and plain data) to compact JSON."""
    return json.dumps(to_jsonable_python(value), ensure_ascii=False, separators=(",", ":"))


def _schema_errors(payload: Any, schema: Mapping[str, Any]) -> list[str]:
    validator_cls = validator_for(schema, default=Draft7Validator)
    try:
        validator_cls.check_schema(schema)
    except SchemaError as exc:
        raise ConfigurationError(f"invalid JSON schema: {exc.message}") from exc
    return [f"{err.json_path}: {err.message}" for err in validator_cls(schema).iter_errors(payload)]


def validate_raw_json(data: str | bytes, schema: Mapping[str, Any]) -> Any:
    """Check that ``data`` is JSON conforming to ``schema`` and return the parsed payload.

    Malformed JSON and schema violations both raise ``InvalidOutputError``.
    """
    try:
        payload = _loads(data)
    except ValueError as exc:
        raise InvalidOutputError(f"invalid output: {exc}") from exc

    errors = _schema_errors(payload, schema)
    if errors:
        logger.debug("Schema validation failed: %s", errors)
        raise InvalidOutputError("invalid output: " + "; ".join(errors), errors=errors)
    return payload


def validate_json(value: Any, schema: Mapping[str, Any]) -> Any:
    """Serialize ``value`` and validate it against ``schema``."""
    return validate_raw_json(to_json(value), schema)


@lru_cache(maxsize=None)
def _adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def unmarshal_validate(data: str | bytes, target: Any, schema: Mapping[str, Any]) -> Any:
    """Validate ``data`` against ``schema``, then decode it into ``target``.

    ``target`` is any type pydantic can build (a model class, ``list[int]``...);
    with ``None`` the parsed JSON is returned as is. Nothing is decoded unless the
    schema check passes first.
    """
    payload = validate_raw_json(data, schema)
    if target is None:
        return payload
    try:
        return _adapter(target).validate_json(data)
    except ValidationError as exc:
        raise InvalidOutputError(f"invalid output: {exc}", errors=[str(e["msg"]) for e in exc.errors()]) from exc


def schema_for(target: Any) -> dict[str, Any]:
    """JSON Schema of a type pydantic can build."""
    return _adapter(target).json_schema()
