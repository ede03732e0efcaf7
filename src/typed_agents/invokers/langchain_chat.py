"""Invoker over any langchain-core chat model."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from ..config import Settings
from ..errors import ConfigurationError
from ..session import Invoker, Message, Role

logger = logging.getLogger(__name__)


def _to_langchain(message: Message) -> BaseMessage:
    if message.role is Role.AGENT:
        return AIMessage(content=message.content)
    if message.role is Role.SYSTEM:
        return SystemMessage(content=message.content)
    return HumanMessage(content=message.content)


def content_text(content: Any) -> str:
    """Flatten a chat model's message content to plain text.

    Providers return either a string or a list of parts; only text parts are kept
    (Gemini thinking parts are dropped).
    """
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type", "text") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content) if content else ""


class LangChainInvoker(Invoker):
    def __init__(self, model: BaseChatModel) -> None:
        self.model = model

    def build_messages(self, system_prompt: str, messages: Sequence[Message]) -> list[BaseMessage]:
        chat: list[BaseMessage] = []
        if system_prompt:
            chat.append(SystemMessage(content=system_prompt))
        chat.extend(_to_langchain(m) for m in messages)
        return chat

    async def invoke(self, system_prompt: str, messages: Sequence[Message]) -> str:
        response = await self.model.ainvoke(self.build_messages(system_prompt, messages))
        return content_text(getattr(response, "content", None))


def build_gemini_model(settings: Settings) -> ChatGoogleGenerativeAI:
    """Instantiate the Gemini chat model described by ``settings``."""
    if not settings.google_api_key:
        raise ConfigurationError("GOOGLE_API_KEY not configured")
    return ChatGoogleGenerativeAI(
        model=settings.gemini_model,
        api_key=settings.google_api_key,
        timeout=settings.request_timeout,
        max_retries=settings.max_retries,
    )
