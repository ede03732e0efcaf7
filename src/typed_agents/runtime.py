from __future__ import annotations

import asyncio
import inspect
import json
import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Callable, Mapping, Sequence

from pydantic import BaseModel, ConfigDict, StrictBool, StrictStr, ValidationError

from .errors import (
    AgentCancelledError,
    ConfigurationError,
    InputValidationError,
    InvalidOutputError,
    MalformedReplyError,
    MaxTurnsExceededError,
    MissingToolFieldError,
    NoJSONFoundError,
    ToolArgumentError,
    ToolDecodeError,
    UnknownToolError,
)
from .jsonutil import extract_json, schema_for, to_json, unmarshal_validate, validate_json
from .prompt import PromptBuilder, render_prompt_template
from .session import ChatSession, Invoker

if TYPE_CHECKING:
    from .config import Settings
    from .tools import ToolSet

logger = logging.getLogger(__name__)

# Raises UnknownToolError (or KeyError) for a name it does not know.
ToolDecoder = Callable[[str, bytes], Any]
# May return the result directly or an awaitable resolving to it.
ToolInvoker = Callable[[str, Any], Any]


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    schema: Mapping[str, Any]


class ToolResponse(BaseModel):
    """Structured reply of the model while tools are enabled.

    Either a tool call (``name`` + ``args``) or a final answer (``done`` + ``out``).
    """

    model_config = ConfigDict(extra="ignore")

    done: StrictBool | None = None
    out: Any = None
    name: StrictStr | None = None
    args: Any = None


@dataclass
class Request:
    """Everything a single runtime invocation needs."""

    prompt_template: str = ""
    instructions: str = ""
    input: Any = None
    input_schema: Mapping[str, Any] | None = None
    # Any pydantic-buildable type; None returns the validated JSON payload as is.
    output_type: Any = None
    # Derived from output_type when omitted.
    output_schema: Mapping[str, Any] | None = None
    skip_input: bool = False
    tool_specs: Sequence[ToolSpec] = field(default_factory=list)
    tool_decoder: ToolDecoder | None = None
    tool_invoker: ToolInvoker | None = None
    # Overrides the runtime's cap for this request.
    max_turns: int | None = None

    def resolved_output_schema(self) -> Mapping[str, Any] | None:
        if self.output_schema is not None:
            return self.output_schema
        if self.output_type is not None:
            return schema_for(self.output_type)
        return None

    def with_tools(self, toolset: ToolSet) -> Request:
        """Return a copy of this request wired to ``toolset``."""
        return replace(
            self,
            tool_specs=toolset.specs(),
            tool_decoder=toolset.decode,
            tool_invoker=toolset.invoke,
        )


def _decode_plain(name: str, raw_args: bytes) -> Any:
    return json.loads(raw_args)


def _parse_tool_response(reply: str) -> ToolResponse:
    raw = extract_json(reply)
    if not raw:
        raise NoJSONFoundError()
    try:
        return ToolResponse.model_validate_json(raw)
    except ValidationError as exc:
        raise MalformedReplyError(f"invalid JSON format: {raw}", raw=raw) from exc


def _raise_if_cancelled(cancel_event: asyncio.Event | None, turns: int) -> None:
    if cancel_event is not None and cancel_event.is_set():
        logger.info("[AGENT] Cancelled after %d tool call(s)", turns)
        raise AgentCancelledError()


def _truncate(text: str, limit: int = 500) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


class Runtime:
    """Turns a typed ``Request`` into a conversation with a text-completion backend.

    A runtime only holds the invoker; every call to ``invoke`` builds its own
    ``ChatSession``, so one instance can serve concurrent invocations.
    """

    def __init__(self, invoker: Invoker, *, max_turns: int | None = None) -> None:
        if max_turns is not None and max_turns < 1:
            raise ValueError("max_turns must be a positive integer")
        self._invoker = invoker
        self._max_turns = max_turns

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> Runtime:
        from .config import get_settings
        from .invokers import build_invoker

        resolved = settings or get_settings()
        return cls(build_invoker(resolved), max_turns=resolved.max_turns)

    @property
    def invoker(self) -> Invoker:
        return self._invoker

    @property
    def max_turns(self) -> int | None:
        return self._max_turns

    async def invoke(self, request: Request, *, cancel_event: asyncio.Event | None = None) -> Any:
        """Run ``request`` to completion and return the decoded output.

        Without a tool invoker the first reply is the answer. Otherwise the agent
        loop alternates between model replies and tool calls until the model
        returns ``{"done": true, "out": ...}``. ``cancel_event`` is checked before
        each reply is interpreted and again before each follow-up backend call.
        """
        output_schema = request.resolved_output_schema()
        if output_schema is None:
            raise ConfigurationError("request needs an output_schema or an output_type")

        if request.input_schema is not None:
            try:
                validate_json(request.input, request.input_schema)
            except InvalidOutputError as exc:
                raise InputValidationError(
                    "input does not match input schema", errors=exc.errors
                ) from exc

        prompt = self._prepare_prompt(request)
        logger.debug("[AGENT] Prompt: %s", _truncate(prompt))

        session = ChatSession(self._invoker, request.instructions)
        reply = await session.invoke(prompt)
        logger.debug("[AGENT] Reply: %s", _truncate(reply))

        if request.tool_invoker is None:
            return self._decode_output(reply, request, output_schema)
        return await self._agent_loop(reply, request, output_schema, session, cancel_event)

    def _prepare_prompt(self, request: Request) -> str:
        user_prompt = render_prompt_template(request.prompt_template, request.input)
        return PromptBuilder().build(user_prompt, request)

    def _decode_output(self, reply: str, request: Request, output_schema: Mapping[str, Any]) -> Any:
        raw = extract_json(reply)
        if not raw:
            raise NoJSONFoundError()
        return unmarshal_validate(raw, request.output_type, output_schema)

    async def _agent_loop(
        self,
        reply: str,
        request: Request,
        output_schema: Mapping[str, Any],
        session: ChatSession,
        cancel_event: asyncio.Event | None,
    ) -> Any:
        max_turns = request.max_turns if request.max_turns is not None else self._max_turns
        turns = 0

        while True:
            _raise_if_cancelled(cancel_event, turns)

            response = _parse_tool_response(reply)

            if response.done:
                logger.info("[AGENT] Final answer after %d tool call(s)", turns)
                return unmarshal_validate(to_json(response.out), request.output_type, output_schema)

            if not response.name:
                raise MissingToolFieldError("tool response missing 'name'", field="name")
            if response.args is None:
                raise MissingToolFieldError(f"tool '{response.name}' missing 'args'", field="args")

            if max_turns is not None and turns >= max_turns:
                raise MaxTurnsExceededError(max_turns)

            args = self._decode_tool_args(request, response.name, response.args)
            turns += 1

            observation = await self._call_tool(request, response.name, args)
            _raise_if_cancelled(cancel_event, turns)
            reply = await session.invoke(observation)
            logger.debug("[AGENT] Reply: %s", _truncate(reply))

    def _decode_tool_args(self, request: Request, name: str, args: Any) -> Any:
        # Decoders report unknown names with UnknownToolError or KeyError; any
        # other failure is an argument mismatch.
        decoder = request.tool_decoder or _decode_plain
        raw_args = to_json(args).encode("utf-8")
        try:
            return decoder(name, raw_args)
        except ToolDecodeError:
            raise
        except KeyError as exc:
            raise UnknownToolError(f"unknown tool: {name}", tool_name=name) from exc
        except Exception as exc:
            raise ToolArgumentError(f"tool unmarshal for '{name}': {exc}", tool_name=name) from exc

    async def _call_tool(self, request: Request, name: str, args: Any) -> str:
        logger.info("[AGENT] Executing tool: %s", name)
        try:
            result = request.tool_invoker(name, args)
            if inspect.isawaitable(result):
                result = await result
            rendered = to_json(result)
        except Exception as exc:
            logger.warning("[AGENT] Tool '%s' failed: %s", name, exc)
            return f"ERR: {exc}"

        logger.info("[AGENT] Tool result: %s", _truncate(rendered))
        return f"{name} OUTPUT: {rendered}"
