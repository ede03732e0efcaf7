"""Invoker for a local Ollama server (``/api/chat``)."""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from ..errors import InvokerError
from ..session import Invoker, Message, Role
from ._http import post_json

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:11434"

_ROLES = {
    Role.SYSTEM: "system",
    Role.AGENT: "assistant",
    Role.USER: "user",
}


class OllamaInvoker(Invoker):
    def __init__(
        self,
        model: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        options: dict[str, Any] | None = None,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.options = {k: v for k, v in (options or {}).items() if v is not None}
        self.timeout = timeout
        self._client = client

    def build_payload(self, system_prompt: str, messages: Sequence[Message]) -> dict[str, Any]:
        chat: list[dict[str, str]] = []
        if system_prompt:
            chat.append({"role": "system", "content": system_prompt})
        chat.extend({"role": _ROLES[m.role], "content": m.content} for m in messages)

        payload: dict[str, Any] = {"model": self.model, "messages": chat, "stream": False}
        if self.options:
            payload["options"] = self.options
        return payload

    async def invoke(self, system_prompt: str, messages: Sequence[Message]) -> str:
        data = await post_json(
            f"{self.base_url}/api/chat",
            self.build_payload(system_prompt, messages),
            timeout=self.timeout,
            client=self._client,
        )
        message = data.get("message")
        if not isinstance(message, dict):
            raise InvokerError("backend response has no message")
        return message.get("content") or ""
