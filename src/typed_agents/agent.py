from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from pydantic import BaseModel

from .runtime import Request, Runtime
from .session import Invoker
from .tools import ToolSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Action:
    """One typed operation an agent can perform."""

    name: str
    prompt: str
    input_type: type[BaseModel]
    output_type: type[BaseModel]
    description: str = ""
    skip_input: bool = False


class Agent:
    """Binds instructions, typed actions and tools to a runtime."""

    def __init__(
        self,
        invoker: Invoker,
        *,
        instructions: str = "",
        actions: Iterable[Action] = (),
        tools: ToolSet | None = None,
        max_turns: int | None = None,
    ) -> None:
        self.instructions = instructions
        self.tools = tools
        self.actions = {action.name: action for action in actions}
        self._runtime = Runtime(invoker, max_turns=max_turns)

    def build_request(self, action_name: str, value: BaseModel) -> Request:
        action = self.actions[action_name]
        if not isinstance(value, action.input_type):
            raise TypeError(
                f"action '{action_name}' expects {action.input_type.__name__}, got {type(value).__name__}"
            )

        request = Request(
            prompt_template=action.prompt,
            instructions=self.instructions,
            input=value,
            input_schema=action.input_type.model_json_schema(),
            output_type=action.output_type,
            output_schema=action.output_type.model_json_schema(),
            skip_input=action.skip_input,
        )
        if self.tools:
            request = request.with_tools(self.tools)
        return request

    async def run(
        self,
        action_name: str,
        value: BaseModel,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> BaseModel:
        """Run ``action_name`` on ``value`` and return the action's output model."""
        request = self.build_request(action_name, value)
        logger.info("[AGENT] Running action %s", action_name)
        return await self._runtime.invoke(request, cancel_event=cancel_event)
