"""Prompt rendering.

The section headers, their order and their trigger conditions are part of the
prompt format that existing instructions are tuned against; keep them verbatim.
"""

from __future__ import annotations

import json
import logging
from io import StringIO
from typing import TYPE_CHECKING, Any, Mapping, Sequence

import jinja2
from pydantic import BaseModel

from .errors import TemplateError
from .jsonutil import to_json

if TYPE_CHECKING:
    from .runtime import Request, ToolSpec

logger = logging.getLogger(__name__)

WORKFLOW_SECTION = """
[WORKFLOW]

1. You will be given the conversation so far, including:
   - The original user request.
   - Your previous reasoning and tool calls.
   - Tool outputs or error messages.

2. After receiving a tool output or error, you must:
   - Analyze if the goal is achieved.
   - If more steps are required, call another tool with correct parameters.
   - If the goal is complete, provide a clear, final answer to the user.
"""

OUTPUT_FORMAT_SECTION = """
[OUTPUT FORMAT]

Return ONLY a valid JSON object matching the following schema:

"""

TOOL_OUTPUT_FORMAT_SECTION = """
[OUTPUT FORMAT]

After each tool output or error, you must return exactly one JSON object, following these rules:

1. If more steps are required (tool call):

{
\t"name": "<tool name>",
\t"args": {...}
}

- "name": The exact name of the tool to call (must be one of the tools listed in the TOOLS section).
- "args": A JSON object that matches the input schema for the selected tool exactly.
- Do not include extra fields or omit required fields.

2. If goal is achieved (final output):

{
\t"done": true,
\t"out": {...}
}

where "out" is a JSON object strictly matching the following JSON schema:

"""

GUIDELINES_SECTION = """

[GUIDELINES]:

- Do not include any extra text.
- Do not include markdown or code fences.
- Ensure the JSON is syntactically valid.
- All fields must be present, even if empty.

"""


def _join(items: Sequence[Any], sep: str = "") -> str:
    return sep.join(str(item) for item in items)


def _template_context(value: Any) -> dict[str, Any]:
    if isinstance(value, BaseModel):
        context = value.model_dump()
    elif isinstance(value, Mapping):
        context = dict(value)
    else:
        context = {}
    context.setdefault("input", value)
    return context


def render_prompt_template(template: str, value: Any) -> str:
    """Expand a jinja2 prompt template against the request input.

    Fields of the input are top-level variables (``{{ name }}``) and the input
    itself is available as ``input``. Undefined variables are errors. A fresh
    environment is built per call, so rendering shares no state.
    """
    env = jinja2.Environment(
        undefined=jinja2.StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
    )
    env.globals["join"] = _join

    try:
        compiled = env.from_string(template)
    except jinja2.TemplateSyntaxError as exc:
        raise TemplateError(f"template parse: {exc}", stage="parse") from exc

    try:
        return compiled.render(_template_context(value))
    except (jinja2.TemplateError, TypeError, ValueError, AttributeError) as exc:
        raise TemplateError(f"template execute: {exc}", stage="execute") from exc


def _dump_schema(schema: Mapping[str, Any] | None) -> str:
    return json.dumps(schema, ensure_ascii=False, separators=(",", ":"), sort_keys=True)


class PromptBuilder:
    """Assembles the instructional prompt sent as the first user turn."""

    def build(self, user_prompt: str, request: Request) -> str:
        buf = StringIO()
        has_tools = len(request.tool_specs) > 0

        self._write_instructions(buf, request.instructions)
        if has_tools:
            buf.write(WORKFLOW_SECTION)
            self._write_tools(buf, request.tool_specs)
        if not request.skip_input:
            self._write_input(buf, request.input)
        self._write_output_format(buf, request.resolved_output_schema(), has_tools)
        buf.write(GUIDELINES_SECTION)
        self._write_user_prompt(buf, user_prompt)

        return buf.getvalue()

    def _write_instructions(self, buf: StringIO, instructions: str) -> None:
        if instructions:
            buf.write("[SYSTEM INSTRUCTIONS]\n\n")
            buf.write(instructions)
            buf.write("\n\n")

    def _write_tools(self, buf: StringIO, tools: Sequence[ToolSpec]) -> None:
        buf.write("\n[TOOLS]\n\n")
        for tool in tools:
            buf.write(
                f"Tool: {tool.name}\nDescription: {tool.description}\nInputSchema: {_dump_schema(tool.schema)}\n\n"
            )

    def _write_input(self, buf: StringIO, value: Any) -> None:
        buf.write("\n[INPUT]:\n\n")
        buf.write(to_json(value))
        buf.write("\n")

    def _write_output_format(self, buf: StringIO, schema: Mapping[str, Any] | None, has_tools: bool) -> None:
        buf.write(TOOL_OUTPUT_FORMAT_SECTION if has_tools else OUTPUT_FORMAT_SECTION)
        buf.write(_dump_schema(schema))

    def _write_user_prompt(self, buf: StringIO, prompt: str) -> None:
        buf.write("[USER PROMPT]\n\n")
        buf.write(prompt)
        buf.write("\n")
