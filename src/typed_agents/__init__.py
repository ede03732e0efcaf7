"""Schema-validated, tool-calling agents over text-completion backends."""

from __future__ import annotations

from .agent import Action, Agent
from .config import Settings, get_settings
from .errors import (
    AgentCancelledError,
    AgentError,
    ConfigurationError,
    InputValidationError,
    InvalidOutputError,
    InvokerError,
    MalformedReplyError,
    MaxTurnsExceededError,
    MissingToolFieldError,
    NoJSONFoundError,
    ProtocolError,
    TemplateError,
    ToolArgumentError,
    ToolDecodeError,
    UnknownToolError,
)
from .jsonutil import extract_json, unmarshal_validate, validate_json, validate_raw_json
from .prompt import PromptBuilder, render_prompt_template
from .runtime import Request, Runtime, ToolResponse, ToolSpec
from .session import ChatSession, Invoker, Message, Role
from .tools import Tool, ToolSet

__all__ = [
    "Action",
    "Agent",
    "AgentCancelledError",
    "AgentError",
    "ChatSession",
    "ConfigurationError",
    "InputValidationError",
    "InvalidOutputError",
    "Invoker",
    "InvokerError",
    "MalformedReplyError",
    "MaxTurnsExceededError",
    "Message",
    "MissingToolFieldError",
    "NoJSONFoundError",
    "PromptBuilder",
    "ProtocolError",
    "Request",
    "Role",
    "Runtime",
    "Settings",
    "TemplateError",
    "Tool",
    "ToolArgumentError",
    "ToolDecodeError",
    "ToolResponse",
    "ToolSet",
    "ToolSpec",
    "UnknownToolError",
    "extract_json",
    "get_settings",
    "render_prompt_template",
    "unmarshal_validate",
    "validate_json",
    "validate_raw_json",
]
