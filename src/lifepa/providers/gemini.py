"""Gemini provider adapter using the generateContent REST API."""

from datetime import datetime, timedelta
from typing import Any, ClassVar

import httpx

from lifepa.errors import EmptyResponseError, ProtocolError
from lifepa.models import ChatMessage, ChatResponse, Role, ToolDefinition, build_chat_response
from lifepa.providers.base import ChatOptions, HTTPProvider
from lifepa.tools.schema import from_gemini_calls, to_gemini_tools


def tool_calling_instruction(now: datetime) -> str:
    """Date-aware instruction that stops the model asking for dates it can compute."""
    today = now.strftime("%Y-%m-%d")
    tomorrow = (now + timedelta(days=1)).strftime("%Y-%m-%d")
    day_name = now.strftime("%A")
    return (
        "You are an AI assistant with function calling abilities. "
        "Call functions directly without asking for clarification.\n\n"
        f"TODAY IS {day_name}, {today}\n"
        f"TOMORROW IS {tomorrow}\n\n"
        "Rules:\n"
        f"1. Never ask what date tomorrow is. It is {tomorrow}.\n"
        "2. Never ask users to provide dates in a specific format. Convert them yourself.\n"
        "3. Call functions as soon as you have enough information.\n"
        "4. Convert times yourself:\n"
        '   - "4pm" or "4 pm" = "16:00"\n'
        '   - "9am" or "9 am" = "09:00"\n'
        '   - "noon" = "12:00"\n'
        '   - "midnight" = "00:00"\n\n'
        'Example: "schedule a call with Tom tomorrow at 4pm" -> call create_event with '
        f'title="Call with Tom", date="{tomorrow}", time="16:00".'
    )


def to_contents(messages: list[ChatMessage]) -> list[dict[str, object]]:
    contents: list[dict[str, object]] = []
    for msg in messages:
        if msg.role == Role.SYSTEM:
            continue
        gemini_role = "model" if msg.role == Role.ASSISTANT else "user"
        contents.append({"role": gemini_role, "parts": [{"text": msg.content}]})
    return contents


class GeminiProvider(HTTPProvider):
    provider_id: ClassVar[str] = "gemini"
    secret_key: ClassVar[str] = "GEMINI_API_KEY"

    def _auth_headers(self, credential: str) -> dict[str, str]:
        return {"x-goog-api-key": credential}

    def build_body(
        self,
        messages: list[ChatMessage],
        tools: list[ToolDefinition] | None,
        options: ChatOptions | None,
    ) -> dict[str, object]:
        temperature, max_tokens = self._resolve(options)
        system_parts = [
            m.content for m in messages if m.role == Role.SYSTEM and m.content.strip()
        ]
        if tools:
            now = (options.now if options else None) or datetime.now()
            system_parts.insert(0, tool_calling_instruction(now))
        body: dict[str, object] = {
            "contents": to_contents(messages),
            "generationConfig": {"temperature": temperature, "maxOutputTokens": max_tokens},
        }
        if system_parts:
            body["systemInstruction"] = {"parts": [{"text": "\n\n".join(system_parts)}]}
        if tools:
            body["tools"] = to_gemini_tools(tools)
        return body

    def parse_response(self, payload: Any) -> ChatResponse:
        if not isinstance(payload, dict):
            raise ProtocolError("gemini response is not an object")
        candidates = payload.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            raise EmptyResponseError("gemini response has no candidates")
        first = candidates[0]
        content = first.get("content") if isinstance(first, dict) else None
        if not isinstance(content, dict):
            raise EmptyResponseError("gemini response content missing")
        parts = content.get("parts", [])
        text_parts: list[str] = []
        if isinstance(parts, list):
            for part in parts:
                if isinstance(part, dict) and isinstance(part.get("text"), str):
                    text_parts.append(part["text"])
        text = "\n".join(p for p in text_parts if p).strip()
        return build_chat_response(self.provider_id, text, from_gemini_calls(parts))

    async def send_chat(
        self,
        messages: list[ChatMessage],
        tools: list[ToolDefinition] | None = None,
        options: ChatOptions | None = None,
    ) -> ChatResponse:
        credential = self._require_credential()
        body = self.build_body(messages, tools, options)
        url = f"{self.base_url}/models/{self.model}:generateContent"
        payload = await self._post_json(url, body, credential)
        return self.parse_response(payload)

    async def _probe(self, credential: str) -> int:
        async with httpx.AsyncClient(timeout=10, transport=self._transport) as client:
            response = await client.get(
                f"{self.base_url}/models/{self.model}", headers=self._auth_headers(credential)
            )
        return response.status_code
