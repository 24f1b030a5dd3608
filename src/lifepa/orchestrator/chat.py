"""Chat orchestrator: one entry point over whichever provider is active."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime

import httpx

from lifepa.config import Settings, get_settings
from lifepa.errors import ConfigError, NotInitializedError
from lifepa.logging import bind_context, unbind_context
from lifepa.models import ChatMessage, ChatResponse, ExecutionResult, ToolDefinition
from lifepa.orchestrator.prompt_builder import build_conversation, summarize_results
from lifepa.providers.base import (
    ChatOptions,
    HTTPProvider,
    delete_credential,
    load_credential,
    save_credential,
)
from lifepa.providers.registry import build_provider, get_provider_info
from lifepa.resilience import RetryPolicy, retry, with_timeout
from lifepa.stores import SecretStore
from lifepa.tools.definitions import AI_TOOLS
from lifepa.tools.executor import FunctionExecutor

logger = logging.getLogger(__name__)

ACTIVE_PROVIDER_KEY = "AI_PROVIDER"


@dataclass(slots=True, frozen=True)
class AdapterContext:
    """The active provider bound to its credential. Replaced, never mutated."""

    provider_id: str
    adapter: HTTPProvider


@dataclass(slots=True)
class TurnResult:
    response: ChatResponse
    results: list[ExecutionResult] = field(default_factory=list)

    @property
    def reply(self) -> str:
        if self.results:
            summary = summarize_results(self.results)
            return f"{self.response.text}\n\n{summary}".strip() if self.response.text else summary
        return self.response.text

    @property
    def actions(self) -> list[str]:
        return [r.action for r in self.results if r.action]


class ChatOrchestrator:
    def __init__(
        self,
        secret_store: SecretStore,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.secret_store = secret_store
        self.settings = settings or get_settings()
        self._transport = transport
        self._retry_policy = retry_policy
        self._sleep = sleep
        self._context: AdapterContext | None = None

    @property
    def context(self) -> AdapterContext | None:
        return self._context

    def active_provider_id(self) -> str:
        stored = self.secret_store.get(ACTIVE_PROVIDER_KEY)
        return (stored or self.settings.ai_provider).strip().lower()

    def _template(self, provider_id: str) -> HTTPProvider:
        return build_provider(provider_id, self.settings, transport=self._transport)

    def initialize_from_store(self) -> bool:
        """Bind the active provider to its stored credential, if one exists."""
        provider_id = self.active_provider_id()
        template = self._template(provider_id)
        credential = load_credential(self.secret_store, template)
        if credential is None:
            logger.info("no stored credential for provider %s", provider_id)
            self._context = None
            return False
        self._context = AdapterContext(provider_id, template.initialize(credential))
        logger.info("provider %s initialized", provider_id)
        return True

    def set_provider(self, provider_id: str) -> bool:
        provider_id = provider_id.strip().lower()
        if get_provider_info(provider_id) is None:
            raise ConfigError(f"unknown AI provider: {provider_id}")
        self.secret_store.set(ACTIVE_PROVIDER_KEY, provider_id)
        return self.initialize_from_store()

    async def validate_credential(self, provider_id: str, candidate: str) -> bool:
        return await self._template(provider_id).validate_credential(candidate)

    def store_credential(self, provider_id: str, credential: str) -> None:
        """Persist ``credential`` then rebuild the context from the store."""
        template = self._template(provider_id)
        template.initialize(credential)
        save_credential(self.secret_store, template, credential)
        if provider_id.strip().lower() == self.active_provider_id():
            self.initialize_from_store()

    def remove_credential(self, provider_id: str) -> None:
        template = self._template(provider_id)
        delete_credential(self.secret_store, template)
        if self._context is not None and self._context.provider_id == template.provider_id:
            self._context = None

    def is_initialized(self) -> bool:
        return self._context is not None

    async def send_chat_message(
        self,
        messages: list[ChatMessage],
        tools: list[ToolDefinition] | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        now: datetime | None = None,
    ) -> ChatResponse:
        context = self._context
        if context is None:
            raise NotInitializedError("no AI provider client is configured")
        options = ChatOptions(temperature=temperature, max_tokens=max_tokens, now=now)
        policy = self._retry_policy or RetryPolicy.from_settings()

        async def _call() -> ChatResponse:
            return await context.adapter.send_chat(messages, tools, options)

        bind_context(provider=context.provider_id)
        try:
            return await with_timeout(
                retry(_call, policy, sleep=self._sleep),
                self.settings.chat_timeout_seconds,
                message=f"{context.provider_id} chat",
            )
        finally:
            unbind_context("provider")

    async def get_completion(
        self,
        messages: list[ChatMessage],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        response = await self.send_chat_message(
            messages, temperature=temperature, max_tokens=max_tokens
        )
        return response.text

    async def health_check(self) -> bool:
        context = self._context
        if context is None:
            return False
        return await context.adapter.health_check()


async def run_assistant_turn(
    orchestrator: ChatOrchestrator,
    executor: FunctionExecutor,
    history: list[ChatMessage],
    *,
    now: datetime,
    tools: list[ToolDefinition] | None = None,
) -> TurnResult:
    """Send ``history`` with tools, then execute any requested tool calls in order."""
    tool_set = list(AI_TOOLS) if tools is None else tools
    response = await orchestrator.send_chat_message(
        build_conversation(history, now), tools=tool_set, now=now
    )
    if not response.tool_calls:
        return TurnResult(response=response)
    logger.info("executing %d tool calls", len(response.tool_calls))
    results = await executor.execute_tool_calls(response.tool_calls)
    return TurnResult(response=response, results=results)
