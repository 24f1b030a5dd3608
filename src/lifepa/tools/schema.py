"""Translate neutral tool definitions to and from each provider's native format."""

import json
import logging
from collections.abc import Callable
from typing import Any

from lifepa.errors import ProtocolError
from lifepa.models import ParamType, ToolCall, ToolDefinition

logger = logging.getLogger(__name__)

_JSON_SCHEMA_TYPES = {
    ParamType.STRING: "string",
    ParamType.NUMBER: "number",
    ParamType.BOOLEAN: "boolean",
    ParamType.OBJECT: "object",
    ParamType.ARRAY: "array",
}

_COHERE_TYPES = {
    ParamType.STRING: "str",
    ParamType.NUMBER: "float",
    ParamType.BOOLEAN: "bool",
    ParamType.OBJECT: "dict",
    ParamType.ARRAY: "list",
}


def to_json_schema(tool: ToolDefinition) -> dict[str, object]:
    properties: dict[str, object] = {}
    for name, param in tool.parameters.items():
        properties[name] = {
            "type": _JSON_SCHEMA_TYPES[ParamType.coerce(param.type)],
            "description": param.description,
        }
    return {
        "type": "object",
        "properties": properties,
        "required": tool.required_parameters(),
    }


def to_openai_tools(tools: list[ToolDefinition]) -> list[dict[str, object]]:
    return [
        {
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.description,
                "parameters": to_json_schema(tool),
            },
        }
        for tool in tools
    ]


def to_gemini_tools(tools: list[ToolDefinition]) -> list[dict[str, object]]:
    declarations: list[dict[str, object]] = []
    for tool in tools:
        properties: dict[str, object] = {}
        for name, param in tool.parameters.items():
            properties[name] = {
                "type": ParamType.coerce(param.type).value,
                "description": param.description,
            }
        declarations.append(
            {
                "name": tool.name,
                "description": tool.description,
                "parameters": {
                    "type": "OBJECT",
                    "properties": properties,
                    "required": tool.required_parameters(),
                },
            }
        )
    return [{"functionDeclarations": declarations}]


def to_cohere_tools(tools: list[ToolDefinition]) -> list[dict[str, object]]:
    converted: list[dict[str, object]] = []
    for tool in tools:
        definitions: dict[str, object] = {}
        for name, param in tool.parameters.items():
            definitions[name] = {
                "description": param.description,
                "type": _COHERE_TYPES[ParamType.coerce(param.type)],
                "required": param.required,
            }
        converted.append(
            {
                "name": tool.name,
                "description": tool.description,
                "parameter_definitions": definitions,
            }
        )
    return converted


def _decode_arguments(raw: object) -> dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        if not raw.strip():
            return {}
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ProtocolError(f"tool call arguments are not valid JSON: {exc}") from exc
        if isinstance(decoded, dict):
            return decoded
        raise ProtocolError("tool call arguments must decode to an object")
    return {}


def from_openai_calls(message: dict[str, Any]) -> list[ToolCall]:
    calls: list[ToolCall] = []
    raw_calls = message.get("tool_calls") or []
    if not isinstance(raw_calls, list):
        return calls
    for call in raw_calls:
        if not isinstance(call, dict):
            continue
        fn = call.get("function")
        if not isinstance(fn, dict):
            continue
        name = fn.get("name")
        if isinstance(name, str) and name:
            calls.append(ToolCall(name=name, parameters=_decode_arguments(fn.get("arguments"))))
    return calls


def from_gemini_calls(parts: object) -> list[ToolCall]:
    calls: list[ToolCall] = []
    if not isinstance(parts, list):
        return calls
    for part in parts:
        if not isinstance(part, dict):
            continue
        function_call = part.get("functionCall")
        if not isinstance(function_call, dict):
            continue
        name = function_call.get("name")
        if isinstance(name, str) and name:
            calls.append(
                ToolCall(name=name, parameters=_decode_arguments(function_call.get("args")))
            )
    return calls


def from_cohere_calls(payload: dict[str, Any]) -> list[ToolCall]:
    calls: list[ToolCall] = []
    raw_calls = payload.get("tool_calls") or []
    if not isinstance(raw_calls, list):
        return calls
    for call in raw_calls:
        if not isinstance(call, dict):
            continue
        name = call.get("name")
        if isinstance(name, str) and name:
            calls.append(ToolCall(name=name, parameters=_decode_arguments(call.get("parameters"))))
    return calls


_TO_PROVIDER: dict[str, Callable[[list[ToolDefinition]], list[dict[str, object]]]] = {
    "openai": to_openai_tools,
    "gemini": to_gemini_tools,
    "cohere": to_cohere_tools,
}

_FROM_PROVIDER: dict[str, Callable[[Any], list[ToolCall]]] = {
    "openai": from_openai_calls,
    "gemini": from_gemini_calls,
    "cohere": from_cohere_calls,
}


def supports_tools(provider: str) -> bool:
    return provider in _TO_PROVIDER


def to_provider_format(provider: str, tools: list[ToolDefinition]) -> list[dict[str, object]]:
    """Render ``tools`` in ``provider``'s function-calling schema.

    Pure: the same input always yields structurally identical output.
    """
    converter = _TO_PROVIDER.get(provider)
    if converter is None:
        raise ProtocolError(f"provider {provider!r} has no native tool calling")
    return converter(tools)


def from_provider_calls(provider: str, payload: Any) -> list[ToolCall]:
    """Extract neutral tool calls from ``provider``'s raw call payload.

    openai takes the assistant message, gemini the candidate parts list and
    cohere the whole response body.
    """
    parser = _FROM_PROVIDER.get(provider)
    if parser is None:
        logger.debug("provider %s has no tool call format", provider)
        return []
    return parser(payload)
