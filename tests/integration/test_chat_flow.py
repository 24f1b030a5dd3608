import json
from datetime import datetime

import httpx
import pytest

from lifepa.models import ChatMessage
from lifepa.orchestrator.chat import ChatOrchestrator, run_assistant_turn
from lifepa.resilience import RetryPolicy
from lifepa.stores import MemoryPersistenceStore, MemorySecretStore
from lifepa.tools.actions import build_app_registry
from lifepa.tools.executor import FunctionExecutor

NOW = datetime(2025, 1, 1, 9, 30)


class _CohereScript:
    def __init__(self, payloads: list[dict]) -> None:
        self.payloads = list(payloads)
        self.bodies: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.bodies.append(json.loads(request.content))
        return httpx.Response(200, json=self.payloads.pop(0))


async def _no_sleep(_seconds: float) -> None:
    return None


def _setup(
    payloads: list[dict],
) -> tuple[ChatOrchestrator, FunctionExecutor, MemoryPersistenceStore, _CohereScript]:
    script = _CohereScript(payloads)
    orchestrator = ChatOrchestrator(
        MemorySecretStore(),
        transport=httpx.MockTransport(script),
        retry_policy=RetryPolicy(max_retries=1, base_delay_ms=1, max_delay_ms=1),
        sleep=_no_sleep,
    )
    orchestrator.store_credential("cohere", "co-key")
    store = MemoryPersistenceStore()
    executor = FunctionExecutor(build_app_registry(store, "user-1", clock=lambda: NOW))
    return orchestrator, executor, store, script


@pytest.mark.asyncio
async def test_tool_calls_are_executed_in_order_and_summarized() -> None:
    orchestrator, executor, store, script = _setup(
        [
            {
                "text": "",
                "tool_calls": [
                    {
                        "name": "create_event",
                        "parameters": {"title": "Call with Tom", "date": "tomorrow", "time": "4pm"},
                    },
                    {"name": "teleport", "parameters": {}},
                    {"name": "scan_receipt", "parameters": {}},
                ],
            }
        ]
    )

    turn = await run_assistant_turn(
        orchestrator,
        executor,
        [ChatMessage.user("schedule a call with Tom tomorrow at 4pm and scan my receipt")],
        now=NOW,
    )

    assert [r.tool_call.name for r in turn.results] == ["create_event", "teleport", "scan_receipt"]
    assert [r.success for r in turn.results] == [True, False, True]
    assert turn.actions == ["navigate_to_scan"]
    assert "⚠️ Unknown function: teleport" in turn.reply
    events = store.query("events", [("user_id", "==", "user-1")])
    assert [(e["title"], e["date"], e["time"]) for e in events] == [
        ("Call with Tom", "2025-01-02", "16:00")
    ]

    body = script.bodies[0]
    assert body["chat_history"][0]["role"] == "SYSTEM"
    assert "2025-01-01" in body["chat_history"][0]["message"]
    assert {t["name"] for t in body["tools"]} >= {"create_event", "scan_receipt"}


@pytest.mark.asyncio
async def test_plain_reply_runs_no_tools() -> None:
    orchestrator, executor, store, _script = _setup([{"text": "Hello! How can I help?"}])
    turn = await run_assistant_turn(orchestrator, executor, [ChatMessage.user("hi")], now=NOW)
    assert turn.results == []
    assert turn.reply == "Hello! How can I help?"
    assert store.query("events") == []
