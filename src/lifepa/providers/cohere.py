"""Cohere provider adapter using the v1 chat API."""

from typing import Any, ClassVar

import httpx

from lifepa.errors import ProtocolError
from lifepa.models import ChatMessage, ChatResponse, Role, ToolDefinition, build_chat_response
from lifepa.providers.base import ChatOptions, HTTPProvider
from lifepa.tools.schema import from_cohere_calls, to_cohere_tools

_HISTORY_ROLES = {Role.USER: "USER", Role.ASSISTANT: "CHATBOT", Role.SYSTEM: "SYSTEM"}


class CohereProvider(HTTPProvider):
    provider_id: ClassVar[str] = "cohere"
    secret_key: ClassVar[str] = "COHERE_API_KEY"
    default_max_tokens: ClassVar[int] = 500
    lenient_validation: ClassVar[bool] = True

    def build_body(
        self,
        messages: list[ChatMessage],
        tools: list[ToolDefinition] | None,
        options: ChatOptions | None,
    ) -> dict[str, object]:
        if not messages:
            raise ProtocolError("cohere chat requires at least one message")
        temperature, max_tokens = self._resolve(options)
        *earlier, last = messages
        body: dict[str, object] = {
            "message": last.content,
            "model": self.model,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        history = [{"role": _HISTORY_ROLES[m.role], "message": m.content} for m in earlier]
        if history:
            body["chat_history"] = history
        if tools:
            body["tools"] = to_cohere_tools(tools)
        return body

    def parse_response(self, payload: Any) -> ChatResponse:
        if not isinstance(payload, dict):
            raise ProtocolError("cohere response is not an object")
        text = payload.get("text")
        text = text.strip() if isinstance(text, str) else ""
        return build_chat_response(self.provider_id, text, from_cohere_calls(payload))

    async def send_chat(
        self,
        messages: list[ChatMessage],
        tools: list[ToolDefinition] | None = None,
        options: ChatOptions | None = None,
    ) -> ChatResponse:
        credential = self._require_credential()
        body = self.build_body(messages, tools, options)
        payload = await self._post_json(f"{self.base_url}/chat", body, credential)
        return self.parse_response(payload)

    async def _probe(self, credential: str) -> int:
        async with httpx.AsyncClient(timeout=10, transport=self._transport) as client:
            response = await client.post(
                f"{self.base_url}/chat",
                json={"message": "test", "model": self.model, "max_tokens": 1},
                headers=self._auth_headers(credential),
            )
        return response.status_code
