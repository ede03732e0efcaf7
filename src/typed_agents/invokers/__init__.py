"""Text-completion backends satisfying the ``Invoker`` contract."""

from __future__ import annotations

import logging

from ..config import Settings, get_settings
from ..errors import ConfigurationError
from ..session import Invoker
from .anthropic import AnthropicInvoker
from .langchain_chat import LangChainInvoker, build_gemini_model
from .ollama import OllamaInvoker
from .openai import OpenAIInvoker

logger = logging.getLogger(__name__)


def build_invoker(settings: Settings | None = None) -> Invoker:
    """Create the invoker selected by ``settings.backend``."""
    resolved = settings or get_settings()
    logger.info("Using %s backend", resolved.backend)

    if resolved.backend == "ollama":
        return OllamaInvoker(
            resolved.ollama_model,
            base_url=resolved.ollama_base_url,
            options={
                "temperature": resolved.ollama_temperature,
                "num_ctx": resolved.ollama_num_ctx,
            },
            timeout=resolved.request_timeout,
        )

    if resolved.backend == "anthropic":
        if not resolved.anthropic_api_key:
            raise ConfigurationError("ANTHROPIC_API_KEY not configured")
        return AnthropicInvoker(
            resolved.anthropic_api_key,
            resolved.anthropic_model,
            max_tokens=resolved.anthropic_max_tokens,
            base_url=resolved.anthropic_base_url,
            timeout=resolved.request_timeout,
        )

    if resolved.backend == "openai":
        if not resolved.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY not configured")
        return OpenAIInvoker(
            resolved.openai_api_key,
            resolved.openai_model,
            base_url=resolved.openai_base_url,
            timeout=resolved.request_timeout,
        )

    return LangChainInvoker(build_gemini_model(resolved))


__all__ = [
    "AnthropicInvoker",
    "LangChainInvoker",
    "OllamaInvoker",
    "OpenAIInvoker",
    "build_gemini_model",
    "build_invoker",
]
