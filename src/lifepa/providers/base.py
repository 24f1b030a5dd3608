"""Provider contracts and the shared HTTP adapter base."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Protocol, Self

import httpx

from lifepa.errors import (
    NotInitializedError,
    ProtocolError,
    provider_error_from_httpx,
    provider_error_from_status,
)
from lifepa.models import ChatMessage, ChatResponse, ToolDefinition
from lifepa.stores import SecretStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ChatOptions:
    temperature: float | None = None
    max_tokens: int | None = None
    now: datetime | None = field(default=None)


class ProviderAdapter(Protocol):
    provider_id: ClassVar[str]
    secret_key: ClassVar[str]

    def initialize(self, credential: str) -> Self: ...

    @property
    def is_initialized(self) -> bool: ...

    async def send_chat(
        self,
        messages: list[ChatMessage],
        tools: list[ToolDefinition] | None = None,
        options: ChatOptions | None = None,
    ) -> ChatResponse: ...

    async def validate_credential(self, candidate: str) -> bool: ...

    async def health_check(self) -> bool: ...


class HTTPProvider:
    """Common plumbing for JSON-over-HTTPS providers.

    An instance without a credential is a template; ``initialize`` returns a
    new instance bound to a credential and never mutates the template.
    """

    provider_id: ClassVar[str] = ""
    secret_key: ClassVar[str] = ""
    default_temperature: ClassVar[float] = 0.7
    default_max_tokens: ClassVar[int] = 1000
    # Treat non-auth failures during key validation as "cannot verify".
    lenient_validation: ClassVar[bool] = False

    def __init__(
        self,
        model: str,
        base_url: str,
        *,
        timeout_seconds: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
        credential: str | None = None,
    ) -> None:
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._credential = credential

    def initialize(self, credential: str) -> Self:
        if not credential or not credential.strip():
            raise NotInitializedError(f"{self.provider_id} credential is empty")
        return type(self)(
            self.model,
            self.base_url,
            timeout_seconds=self.timeout_seconds,
            transport=self._transport,
            credential=credential.strip(),
        )

    @property
    def is_initialized(self) -> bool:
        return self._credential is not None

    def _require_credential(self) -> str:
        if self._credential is None:
            raise NotInitializedError(
                f"{self.provider_id} client not initialized. Please set your API key first."
            )
        return self._credential

    def _auth_headers(self, credential: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {credential}"}

    def _resolve(self, options: ChatOptions | None) -> tuple[float, int]:
        options = options or ChatOptions()
        temperature = (
            options.temperature if options.temperature is not None else self.default_temperature
        )
        max_tokens = options.max_tokens or self.default_max_tokens
        return temperature, max_tokens

    async def _post_json(self, url: str, body: dict[str, Any], credential: str) -> Any:
        headers = {**self._auth_headers(credential), "Content-Type": "application/json"}
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(url, json=body, headers=headers)
        except httpx.HTTPError as exc:
            raise provider_error_from_httpx(self.provider_id, exc) from exc
        if response.status_code >= 400:
            raise provider_error_from_status(self.provider_id, response.status_code, response.text)
        try:
            return response.json()
        except ValueError as exc:
            raise ProtocolError(f"{self.provider_id} response is not JSON") from exc

    async def _probe(self, credential: str) -> int:
        """Issue one minimal authenticated request and return its status code."""
        raise NotImplementedError

    async def validate_credential(self, candidate: str) -> bool:
        if not candidate or not candidate.strip():
            return False
        try:
            status = await self._probe(candidate.strip())
        except httpx.HTTPError as exc:
            logger.warning("%s key validation could not reach service: %s", self.provider_id, exc)
            return self.lenient_validation
        if status in (401, 403):
            return False
        return self.lenient_validation or status < 400

    async def health_check(self) -> bool:
        if self._credential is None:
            return False
        try:
            status = await self._probe(self._credential)
        except httpx.HTTPError:
            return False
        return status < 400


def load_credential(store: SecretStore, adapter: ProviderAdapter) -> str | None:
    value = store.get(adapter.secret_key)
    if value is None or not value.strip():
        return None
    return value


def save_credential(store: SecretStore, adapter: ProviderAdapter, credential: str) -> None:
    store.set(adapter.secret_key, credential.strip())


def delete_credential(store: SecretStore, adapter: ProviderAdapter) -> None:
    store.remove(adapter.secret_key)
