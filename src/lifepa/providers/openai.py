"""OpenAI provider adapter using the chat completions API."""

from typing import Any, ClassVar

import httpx

from lifepa.errors import ProtocolError
from lifepa.models import ChatMessage, ChatResponse, ToolDefinition, build_chat_response
from lifepa.providers.base import ChatOptions, HTTPProvider
from lifepa.tools.schema import from_openai_calls, to_openai_tools


class OpenAIProvider(HTTPProvider):
    provider_id: ClassVar[str] = "openai"
    secret_key: ClassVar[str] = "OPENAI_API_KEY"

    @staticmethod
    def _coerce_text(value: object) -> str:
        if isinstance(value, str):
            return value
        if isinstance(value, list):
            chunks: list[str] = []
            for item in value:
                if isinstance(item, dict) and isinstance(item.get("text"), str):
                    chunks.append(item["text"])
            return "".join(chunks)
        return ""

    def build_body(
        self,
        messages: list[ChatMessage],
        tools: list[ToolDefinition] | None,
        options: ChatOptions | None,
    ) -> dict[str, object]:
        temperature, max_tokens = self._resolve(options)
        body: dict[str, object] = {
            "model": self.model,
            "messages": [{"role": m.role.value, "content": m.content} for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if tools:
            body["tools"] = to_openai_tools(tools)
            body["tool_choice"] = "auto"
        return body

    def parse_response(self, payload: Any) -> ChatResponse:
        if not isinstance(payload, dict):
            raise ProtocolError("openai response is not an object")
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise ProtocolError("openai response missing choices")
        message = choices[0].get("message")
        if not isinstance(message, dict):
            raise ProtocolError("openai response message missing")
        text = self._coerce_text(message.get("content")).strip()
        return build_chat_response(self.provider_id, text, from_openai_calls(message))

    async def send_chat(
        self,
        messages: list[ChatMessage],
        tools: list[ToolDefinition] | None = None,
        options: ChatOptions | None = None,
    ) -> ChatResponse:
        credential = self._require_credential()
        body = self.build_body(messages, tools, options)
        payload = await self._post_json(f"{self.base_url}/chat/completions", body, credential)
        return self.parse_response(payload)

    async def _probe(self, credential: str) -> int:
        async with httpx.AsyncClient(timeout=10, transport=self._transport) as client:
            response = await client.get(
                f"{self.base_url}/models", headers=self._auth_headers(credential)
            )
        return response.status_code
