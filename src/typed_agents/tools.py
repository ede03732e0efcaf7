"""Typed tool registry for the agent loop."""

from __future__ import annotations

import inspect
import logging
import typing
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Callable

from langchain_core.tools import BaseTool
from pydantic import BaseModel, ValidationError

from .errors import ToolArgumentError, UnknownToolError
from .runtime import ToolSpec

logger = logging.getLogger(__name__)


@dataclass
class Tool:
    """A capability the model may call by name.

    ``handler`` receives an instance of ``input_type`` and may be sync or async.
    """

    name: str
    description: str
    input_type: type[BaseModel]
    handler: Callable[[Any], Any]

    @property
    def schema(self) -> dict[str, Any]:
        return self.input_type.model_json_schema()

    def spec(self) -> ToolSpec:
        return ToolSpec(name=self.name, description=self.description, schema=self.schema)


def _input_type_of(fn: Callable[..., Any]) -> type[BaseModel]:
    params = list(inspect.signature(fn).parameters.values())
    if len(params) != 1:
        raise TypeError(f"tool function '{fn.__name__}' must take exactly one argument")
    annotation = typing.get_type_hints(fn).get(params[0].name)
    if not (isinstance(annotation, type) and issubclass(annotation, BaseModel)):
        raise TypeError(f"argument of tool function '{fn.__name__}' must be annotated with a pydantic model")
    return annotation


def _langchain_handler(lc_tool: BaseTool) -> Callable[[BaseModel], Any]:
    async def run(args: BaseModel) -> Any:
        return await lc_tool.ainvoke(args.model_dump(exclude_unset=True))

    return run


class ToolSet:
    """Name-keyed collection of tools.

    Supplies the three things a tool-enabled request needs: the specs rendered
    into the prompt, the argument decoder and the tool invoker.
    """

    def __init__(self, tools: Iterable[Tool] = ()) -> None:
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            self.add(tool)

    @classmethod
    def from_langchain(cls, tools: Iterable[BaseTool]) -> ToolSet:
        """Wrap langchain-core tools; their input schema becomes the argument model."""
        toolset = cls()
        for lc_tool in tools:
            toolset.add(
                Tool(
                    name=lc_tool.name,
                    description=lc_tool.description,
                    input_type=lc_tool.get_input_schema(),
                    handler=_langchain_handler(lc_tool),
                )
            )
        return toolset

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools.values())

    def add(self, tool: Tool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"duplicate tool name: {tool.name}")
        self._tools[tool.name] = tool

    def tool(
        self, name: str | None = None, *, description: str | None = None
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a function taking one pydantic model argument as a tool.

        The name defaults to the function name and the description to its docstring.
        """

        def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
            self.add(
                Tool(
                    name=name or fn.__name__,
                    description=description or inspect.getdoc(fn) or "",
                    input_type=_input_type_of(fn),
                    handler=fn,
                )
            )
            return fn

        return decorator

    def get(self, name: str) -> Tool:
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(f"unknown tool: {name}", tool_name=name)
        return tool

    def specs(self) -> list[ToolSpec]:
        return [tool.spec() for tool in self._tools.values()]

    def decode(self, name: str, raw_args: bytes) -> BaseModel:
        tool = self.get(name)
        try:
            return tool.input_type.model_validate_json(raw_args)
        except ValidationError as exc:
            raise ToolArgumentError(
                f"arguments for tool '{name}' do not match its input schema: {exc}", tool_name=name
            ) from exc

    async def invoke(self, name: str, args: Any) -> Any:
        result = self.get(name).handler(args)
        if inspect.isawaitable(result):
            result = await result
        return result
