"""Invoker for OpenAI-compatible ``/chat/completions`` endpoints."""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from ..errors import InvokerError
from ..session import Invoker, Message, Role
from ._http import post_json

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"

_ROLES = {
    Role.SYSTEM: "system",
    Role.AGENT: "assistant",
    Role.USER: "user",
}


class OpenAIInvoker(Invoker):
    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    def build_payload(self, system_prompt: str, messages: Sequence[Message]) -> dict[str, Any]:
        chat: list[dict[str, str]] = []
        if system_prompt:
            chat.append({"role": "system", "content": system_prompt})
        chat.extend({"role": _ROLES[m.role], "content": m.content} for m in messages)
        return {"model": self.model, "messages": chat}

    async def invoke(self, system_prompt: str, messages: Sequence[Message]) -> str:
        data = await post_json(
            f"{self.base_url}/chat/completions",
            self.build_payload(system_prompt, messages),
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
            client=self._client,
        )
        choices = data.get("choices")
        if not choices or not isinstance(choices[0], dict):
            raise InvokerError("no response from OpenAI")
        message = choices[0].get("message") or {}
        return message.get("content") or ""
