"""Invoker for the Anthropic Messages API."""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from ..session import Invoker, Message, Role
from ._http import post_json

logger = logging.getLogger(__name__)

API_URL = "https://api.anthropic.com/v1/messages"
API_VERSION = "2023-06-01"


class AnthropicInvoker(Invoker):
    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        max_tokens: int = 4096,
        base_url: str = API_URL,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.base_url = base_url
        self.timeout = timeout
        self._client = client

    def build_payload(self, system_prompt: str, messages: Sequence[Message]) -> dict[str, Any]:
        # The API has no system role inside the message list.
        system_parts = [system_prompt] if system_prompt else []
        chat: list[dict[str, str]] = []
        for message in messages:
            if message.role is Role.SYSTEM:
                system_parts.append(message.content)
                continue
            role = "assistant" if message.role is Role.AGENT else "user"
            chat.append({"role": role, "content": message.content})

        payload: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": chat,
        }
        if system_parts:
            payload["system"] = "\n\n".join(system_parts)
        return payload

    async def invoke(self, system_prompt: str, messages: Sequence[Message]) -> str:
        data = await post_json(
            self.base_url,
            self.build_payload(system_prompt, messages),
            headers={
                "x-api-key": self.api_key,
                "anthropic-version": API_VERSION,
                "content-type": "application/json",
            },
            timeout=self.timeout,
            client=self._client,
        )
        return "".join(
            block.get("text", "")
            for block in data.get("content") or []
            if isinstance(block, dict) and block.get("type") == "text"
        )
