"""Hugging Face provider adapter using the text-generation inference API."""

import logging
from typing import Any, ClassVar

import httpx

from lifepa.models import ChatMessage, ChatResponse, Role, ToolDefinition, build_chat_response
from lifepa.providers.base import ChatOptions, HTTPProvider

logger = logging.getLogger(__name__)


def to_transcript(messages: list[ChatMessage]) -> str:
    lines: list[str] = []
    for msg in messages:
        if msg.role == Role.USER:
            lines.append(f"Human: {msg.content}\n")
        elif msg.role == Role.ASSISTANT:
            lines.append(f"Assistant: {msg.content}\n")
    lines.append("Assistant:")
    return "".join(lines)


class HuggingFaceProvider(HTTPProvider):
    provider_id: ClassVar[str] = "huggingface"
    secret_key: ClassVar[str] = "HUGGINGFACE_API_KEY"
    default_temperature: ClassVar[float] = 0.9
    default_max_tokens: ClassVar[int] = 100
    lenient_validation: ClassVar[bool] = True

    def build_body(
        self, messages: list[ChatMessage], options: ChatOptions | None
    ) -> dict[str, object]:
        temperature, max_tokens = self._resolve(options)
        return {
            "inputs": to_transcript(messages),
            "parameters": {
                "max_length": max_tokens,
                "temperature": temperature,
                "top_p": 0.95,
                "do_sample": True,
                "return_full_text": False,
            },
            "options": {"wait_for_model": True, "use_cache": False},
        }

    def parse_response(self, payload: Any) -> ChatResponse:
        text = ""
        if isinstance(payload, list) and payload:
            first = payload[0]
            if isinstance(first, dict) and isinstance(first.get("generated_text"), str):
                text = first["generated_text"]
            elif isinstance(first, str):
                text = first
        elif isinstance(payload, dict) and isinstance(payload.get("generated_text"), str):
            text = payload["generated_text"]
        elif isinstance(payload, str):
            text = payload
        return build_chat_response(self.provider_id, text.strip(), [])

    async def send_chat(
        self,
        messages: list[ChatMessage],
        tools: list[ToolDefinition] | None = None,
        options: ChatOptions | None = None,
    ) -> ChatResponse:
        credential = self._require_credential()
        if tools:
            logger.debug("huggingface has no native tool calling; ignoring %d tools", len(tools))
        body = self.build_body(messages, options)
        payload = await self._post_json(f"{self.base_url}/{self.model}", body, credential)
        return self.parse_response(payload)

    async def _probe(self, credential: str) -> int:
        async with httpx.AsyncClient(timeout=10, transport=self._transport) as client:
            response = await client.post(
                f"{self.base_url}/{self.model}",
                json={"inputs": "test", "options": {"wait_for_model": True}},
                headers=self._auth_headers(credential),
            )
        return response.status_code
