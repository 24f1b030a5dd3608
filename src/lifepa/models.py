"""Core chat and tool-calling data contracts."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from lifepa.errors import EmptyResponseError


class ParamType(StrEnum):
    STRING = "STRING"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"
    OBJECT = "OBJECT"
    ARRAY = "ARRAY"

    @classmethod
    def coerce(cls, value: object) -> "ParamType":
        """Case-insensitive lookup; unknown names map to STRING."""
        if isinstance(value, ParamType):
            return value
        name = str(value).strip().upper()
        if name in ("INTEGER", "INT", "FLOAT"):
            return cls.NUMBER
        try:
            return cls(name)
        except ValueError:
            return cls.STRING


class Role(StrEnum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(slots=True, frozen=True)
class ToolParameter:
    type: ParamType
    description: str
    required: bool = False


@dataclass(slots=True, frozen=True)
class ToolDefinition:
    """Provider-neutral description of a callable tool.

    ``parameters`` keeps insertion order; providers see parameters in the
    order they were declared. It is exposed read-only.
    """

    name: str
    description: str
    parameters: Mapping[str, ToolParameter] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    def required_parameters(self) -> list[str]:
        return [name for name, param in self.parameters.items() if param.required]


@dataclass(slots=True, frozen=True)
class ChatMessage:
    role: Role
    content: str

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        return cls(Role.SYSTEM, content)

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(Role.USER, content)

    @classmethod
    def assistant(cls, content: str) -> "ChatMessage":
        return cls(Role.ASSISTANT, content)


@dataclass(slots=True)
class ToolCall:
    name: str
    parameters: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ChatResponse:
    text: str
    tool_calls: list[ToolCall] | None = None

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)


def build_chat_response(provider: str, text: str, tool_calls: list[ToolCall]) -> ChatResponse:
    """Apply the response invariant: no tool calls requires non-empty text."""
    if tool_calls:
        return ChatResponse(text=text, tool_calls=tool_calls)
    if not text.strip():
        raise EmptyResponseError(f"{provider} returned an empty response")
    return ChatResponse(text=text, tool_calls=None)


@dataclass(slots=True)
class ExecutionResult:
    tool_call: ToolCall
    success: bool
    message: str
    data: Any = None
    action: str | None = None
    error: str | None = None
