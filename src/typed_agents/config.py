from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the agent runtime and its bundled backends."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    backend: Literal["gemini", "ollama", "anthropic", "openai"] = Field(default="gemini", alias="AGENT_BACKEND")

    # Gemini (through langchain-google-genai)
    google_api_key: str | None = Field(default=None, alias="GOOGLE_API_KEY")
    gemini_model: str = Field(default="gemini-2.5-flash", alias="GEMINI_MODEL")

    # Ollama
    ollama_base_url: str = Field(default="http://localhost:11434", alias="OLLAMA_BASE_URL")
    ollama_model: str = Field(default="granite3.3:8b", alias="OLLAMA_MODEL")
    ollama_temperature: float | None = Field(default=None, alias="OLLAMA_TEMPERATURE")
    ollama_num_ctx: int | None = Field(default=None, alias="OLLAMA_NUM_CTX")

    # Anthropic
    anthropic_api_key: str | None = Field(default=None, alias="ANTHROPIC_API_KEY")
    anthropic_model: str = Field(default="claude-sonnet-4-20250514", alias="ANTHROPIC_MODEL")
    anthropic_max_tokens: int = Field(default=4096, alias="ANTHROPIC_MAX_TOKENS")
    anthropic_base_url: str = Field(
        default="https://api.anthropic.com/v1/messages", alias="ANTHROPIC_BASE_URL"
    )

    # OpenAI, or any server exposing the same chat completions API
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", alias="OPENAI_MODEL")
    openai_base_url: str = Field(default="https://api.openai.com/v1", alias="OPENAI_BASE_URL")

    request_timeout: float = Field(default=60.0, alias="AGENT_REQUEST_TIMEOUT")
    # Only forwarded to the langchain model; the runtime itself never retries.
    max_retries: int = Field(default=2, alias="AGENT_MAX_RETRIES")

    # Cap on tool-calling turns per invocation. None keeps the loop unbounded.
    max_turns: int | None = Field(default=None, alias="AGENT_MAX_TURNS")


@lru_cache
def get_settings() -> Settings:
    """Return memoized settings so multiple imports share a single instance."""

    return Settings()  # type: ignore[call-arg]
