"""Exceptions raised by the agent runtime.

Callers can tell a bad request (``ConfigurationError``) from bad model output
(``ProtocolError``), a cancelled run (``AgentCancelledError``) and a backend
failure (``InvokerError``). Tool execution failures never surface here: they are
reported back to the model as a conversation turn.
"""

from __future__ import annotations

from typing import Sequence


class AgentError(Exception):
    """Base class for every error raised by the runtime."""


class ConfigurationError(AgentError):
    """The request cannot be run as configured."""


class TemplateError(ConfigurationError):
    def __init__(self, message: str, stage: str) -> None:
        super().__init__(message)
        self.stage = stage


class InputValidationError(ConfigurationError):
    def __init__(self, message: str, errors: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.errors = list(errors)


class ProtocolError(AgentError):
    """The backend replied with something the protocol does not accept."""


class InvalidOutputError(ProtocolError):
    def __init__(self, message: str = "invalid output", errors: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.errors = list(errors)


class NoJSONFoundError(InvalidOutputError):
    def __init__(self, message: str = "no valid JSON found in response") -> None:
        super().__init__(message)


class MalformedReplyError(ProtocolError):
    def __init__(self, message: str, raw: str) -> None:
        super().__init__(message)
        self.raw = raw


class MissingToolFieldError(ProtocolError):
    def __init__(self, message: str, field: str) -> None:
        super().__init__(message)
        self.field = field


class ToolDecodeError(ProtocolError):
    def __init__(self, message: str, tool_name: str) -> None:
        super().__init__(message)
        self.tool_name = tool_name


class UnknownToolError(ToolDecodeError):
    pass


class ToolArgumentError(ToolDecodeError):
    pass


class MaxTurnsExceededError(ProtocolError):
    def __init__(self, max_turns: int) -> None:
        super().__init__(f"agent exceeded {max_turns} tool-calling turns without a final answer")
        self.max_turns = max_turns


class AgentCancelledError(AgentError):
    def __init__(self, message: str = "agent invocation cancelled") -> None:
        super().__init__(message)


class InvokerError(AgentError):
    """Error from a text-completion backend."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
