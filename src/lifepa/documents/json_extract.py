"""Pull a JSON object out of free-form model output."""

import json
import re
from typing import Any

from lifepa.errors import ProtocolError

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)


def find_balanced_object(text: str) -> str | None:
    """Return the first balanced ``{...}`` block in ``text``, honoring JSON strings."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : index + 1]
        start = text.find("{", start + 1)
    return None


def _loads_object(candidate: str) -> dict[str, Any] | None:
    try:
        value = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


def extract_json_object(text: str) -> dict[str, Any]:
    """Parse the JSON object embedded in ``text``.

    Tries the whole string, then fenced code blocks, then the first balanced
    brace block. Raises ProtocolError when nothing parses.
    """
    if not text or not text.strip():
        raise ProtocolError("no JSON object in empty response")
    stripped = text.strip()

    direct = _loads_object(stripped)
    if direct is not None:
        return direct

    for block in _FENCE_RE.findall(stripped):
        parsed = _loads_object(block.strip())
        if parsed is not None:
            return parsed
        inner = find_balanced_object(block)
        if inner is not None:
            parsed = _loads_object(inner)
            if parsed is not None:
                return parsed

    unfenced = stripped.replace("```json", "").replace("```", "")
    candidate = find_balanced_object(unfenced)
    if candidate is not None:
        parsed = _loads_object(candidate)
        if parsed is not None:
            return parsed
    raise ProtocolError("response does not contain a valid JSON object")
