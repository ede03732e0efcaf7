"""Shared test helpers (scripted backends)."""

from __future__ import annotations

from typing import Sequence

from pydantic import BaseModel

from typed_agents.session import Invoker, Message


class GreetInput(BaseModel):
    name: str = ""


class GreetOutput(BaseModel):
    result: str


class ScriptedInvoker(Invoker):
    """Invoker replaying canned replies and recording every call."""

    def __init__(self, responses: Sequence[str | Exception]) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, tuple[Message, ...]]] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def invoke(self, system_prompt: str, messages: Sequence[Message]) -> str:
        self.calls.append((system_prompt, tuple(messages)))
        if len(self.calls) > len(self.responses):
            raise AssertionError("unexpected call")
        response = self.responses[len(self.calls) - 1]
        if isinstance(response, Exception):
            raise response
        return response
