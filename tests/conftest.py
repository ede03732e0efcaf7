"""Shared test fixtures and configuration."""

from __future__ import annotations

import pytest


@pytest.fixture
def input_schema():
    """Schema of the greeting input: an object with a required string name."""
    return {
        "type": "object",
        "properties": {"name": {"type": "string"}},
        "required": ["name"],
    }


@pytest.fixture
def output_schema():
    """Schema of the greeting output: an object with a required string result."""
    return {
        "type": "object",
        "properties": {"result": {"type": "string"}},
        "required": ["result"],
    }
