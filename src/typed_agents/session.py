from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Author of a conversation turn."""
    SYSTEM = "system"
    AGENT = "agent"
    USER = "user"


@dataclass(frozen=True, slots=True)
class Message:
    role: Role
    content: str


class Invoker(ABC):
    """Stateless bridge to a text-completion backend.

    Implementations receive the whole conversation on every call and must not
    keep any of it between calls.
    """

    @abstractmethod
    async def invoke(self, system_prompt: str, messages: Sequence[Message]) -> str:
        """Return the backend's reply to the given conversation."""


class ChatSession:
    """Append-only conversation owned by a single runtime invocation."""

    def __init__(self, invoker: Invoker, instructions: str = "") -> None:
        self._invoker = invoker
        self._instructions = instructions
        self._messages: list[Message] = []

    @property
    def instructions(self) -> str:
        return self._instructions

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def add(self, message: Message) -> None:
        self._messages.append(message)

    async def invoke(self, text: str) -> str:
        """Send ``text`` as a user turn and record the backend's reply.

        A failing backend call propagates unchanged; the user turn stays in the
        history and no agent turn is added.
        """
        self.add(Message(role=Role.USER, content=text))
        logger.debug("[SESSION] Invoking backend with %d message(s)", len(self._messages))

        reply = await self._invoker.invoke(self._instructions, self.messages)

        self.add(Message(role=Role.AGENT, content=reply))
        return reply
