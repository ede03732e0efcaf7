"""Tests for the typed tool registry."""

from __future__ import annotations

import pytest
from langchain_core.tools import tool
from pydantic import BaseModel

from tests.helpers import ScriptedInvoker
from typed_agents.errors import ToolArgumentError, UnknownToolError
from typed_agents.runtime import Request, Runtime
from typed_agents.tools import Tool, ToolSet


class MathRequest(BaseModel):
    a: float
    b: float


class MathReply(BaseModel):
    result: float


def _math_tools() -> ToolSet:
    tools = ToolSet()

    @tools.tool()
    def add(req: MathRequest) -> MathReply:
        """Add two numbers."""
        return MathReply(result=req.a + req.b)

    @tools.tool(name="div", description="Divide a by b.")
    async def divide(req: MathRequest) -> MathReply:
        if req.b == 0:
            raise ZeroDivisionError("division by zero")
        return MathReply(result=req.a / req.b)

    return tools


@tool
def multiply(a: float, b: float) -> float:
    """Multiply two numbers."""
    return a * b


class TestToolSet:
    """Tests for ToolSet registration, decoding and dispatch."""

    def test_decorator_registers_tools(self):
        """Should infer names, descriptions and input models."""
        tools = _math_tools()

        assert len(tools) == 2
        assert "add" in tools and "div" in tools
        assert tools.get("add").description == "Add two numbers."
        assert tools.get("div").description == "Divide a by b."
        assert tools.get("add").input_type is MathRequest

    def test_specs(self):
        """Should expose one spec per tool with the model's JSON schema."""
        specs = _math_tools().specs()

        assert [s.name for s in specs] == ["add", "div"]
        assert specs[0].schema["required"] == ["a", "b"]

    def test_duplicate_names_rejected(self):
        """Should refuse two tools with the same name."""
        tools = _math_tools()

        with pytest.raises(ValueError):
            tools.add(Tool(name="add", description="", input_type=MathRequest, handler=lambda r: r))

    def test_decorator_requires_model_argument(self):
        """Should refuse functions whose argument is not a pydantic model."""
        tools = ToolSet()

        with pytest.raises(TypeError):

            @tools.tool()
            def bad(value: int) -> int:
                return value

    def test_decode(self):
        """Should decode raw arguments into the tool's input model."""
        assert _math_tools().decode("add", b'{"a": 1, "b": 2}') == MathRequest(a=1, b=2)

    def test_decode_unknown_tool(self):
        """Should raise UnknownToolError for unregistered names."""
        with pytest.raises(UnknownToolError) as exc_info:
            _math_tools().decode("pow", b"{}")

        assert exc_info.value.tool_name == "pow"

    def test_decode_argument_mismatch(self):
        """Should raise ToolArgumentError when arguments do not fit the model."""
        with pytest.raises(ToolArgumentError):
            _math_tools().decode("add", b'{"a": "one"}')

    @pytest.mark.asyncio
    async def test_invoke_sync_and_async(self):
        """Should run both plain and coroutine handlers."""
        tools = _math_tools()

        assert await tools.invoke("add", MathRequest(a=2, b=3)) == MathReply(result=5)
        assert await tools.invoke("div", MathRequest(a=6, b=3)) == MathReply(result=2)


class TestFromLangchain:
    """Tests for wrapping langchain-core tools."""

    def test_wraps_metadata(self):
        """Should carry over name, description and argument schema."""
        tools = ToolSet.from_langchain([multiply])
        spec = tools.specs()[0]

        assert spec.name == "multiply"
        assert "Multiply two numbers." in spec.description
        assert set(spec.schema["properties"]) == {"a", "b"}

    @pytest.mark.asyncio
    async def test_invokes_langchain_tool(self):
        """Should decode arguments and run the langchain tool."""
        tools = ToolSet.from_langchain([multiply])

        args = tools.decode("multiply", b'{"a": 3, "b": 4}')

        assert await tools.invoke("multiply", args) == 12


class TestToolSetWithRuntime:
    """End-to-end agent loop with a ToolSet."""

    @pytest.mark.asyncio
    async def test_calculator_conversation(self):
        """Should run tools, report tool errors back, and finish."""
        mock = ScriptedInvoker([
            '{"name": "add", "args": {"a": 8, "b": 3}}',
            '{"name": "div", "args": {"a": 2, "b": 0}}',
            '{"done": true, "out": {"result": 11}}',
        ])
        request = Request(
            prompt_template="Evaluate {{ expr }}",
            input={"expr": "8 + 3"},
            output_type=MathReply,
        ).with_tools(_math_tools())

        out = await Runtime(mock).invoke(request)

        assert out == MathReply(result=11)
        history = mock.calls[2][1]
        assert history[2].content == 'add OUTPUT: {"result":11.0}'
        assert history[4].content == "ERR: division by zero"
        assert "Tool: add\nDescription: Add two numbers." in history[0].content
