from datetime import datetime

import pytest

from lifepa.models import ToolCall
from lifepa.stores import MemoryPersistenceStore
from lifepa.tools.actions import build_app_registry
from lifepa.tools.definitions import AI_TOOLS
from lifepa.tools.executor import FunctionExecutor
from lifepa.tools.registry import ToolRegistry

NOW = datetime(2025, 1, 1, 9, 30)


def _executor(store: MemoryPersistenceStore) -> FunctionExecutor:
    return FunctionExecutor(build_app_registry(store, "user-1", clock=lambda: NOW))


def test_registry_covers_the_neutral_tool_set() -> None:
    registry = build_app_registry(MemoryPersistenceStore(), "user-1")
    assert registry.names() == [tool.name for tool in AI_TOOLS]


@pytest.mark.asyncio
async def test_unknown_call_does_not_stop_the_batch() -> None:
    store = MemoryPersistenceStore()
    calls = [
        ToolCall("create_event", {"title": "Dentist", "date": "tomorrow", "time": "4pm"}),
        ToolCall("fly_to_moon", {}),
        ToolCall("set_reminder", {"title": "Pay rent", "date": "2025-01-05", "time": "09:00"}),
    ]
    results = await _executor(store).execute_tool_calls(calls)

    assert [r.success for r in results] == [True, False, True]
    assert "Unknown" in results[1].message
    assert results[1].error is not None
    assert [r.tool_call.name for r in results] == [c.name for c in calls]
    event = results[0].data
    assert event["date"] == "2025-01-02"
    assert event["time"] == "16:00"
    assert event["datetime"] == "2025-01-02T16:00:00"
    assert len(store.query("events", [])) == 1
    assert len(store.query("reminders", [])) == 1


@pytest.mark.asyncio
async def test_validation_failure_is_reported_not_raised() -> None:
    store = MemoryPersistenceStore()
    result = await _executor(store).execute(ToolCall("set_reminder", {"title": "x"}))
    assert result.success is False
    assert result.message.startswith("Failed to execute set_reminder:")
    assert "Date is required" in result.message
    assert store.query("reminders", []) == []


@pytest.mark.asyncio
async def test_scan_receipt_returns_navigation_action() -> None:
    result = await _executor(MemoryPersistenceStore()).execute(ToolCall("scan_receipt", {}))
    assert result.success
    assert result.action == "navigate_to_scan"
    assert result.message == "Opening receipt scanner..."


@pytest.mark.asyncio
async def test_view_upcoming_tasks_lists_open_items_in_window() -> None:
    store = MemoryPersistenceStore()
    executor = _executor(store)
    await executor.execute_tool_calls(
        [
            ToolCall("create_event", {"title": "Dentist", "date": "2025-01-03", "time": "10:00"}),
            ToolCall("set_reminder", {"title": "Bins", "date": "2025-01-02", "time": "07:00"}),
            ToolCall("create_event", {"title": "Holiday", "date": "2025-03-01", "time": "08:00"}),
        ]
    )
    result = await executor.execute(ToolCall("view_upcoming_tasks", {"days": 7}))
    assert result.success
    assert [t["title"] for t in result.data] == ["Bins", "Dentist"]
    assert "next 7 days" in result.message


@pytest.mark.asyncio
async def test_view_upcoming_tasks_empty() -> None:
    result = await _executor(MemoryPersistenceStore()).execute(ToolCall("view_upcoming_tasks", {}))
    assert result.data == []
    assert result.message == "You have no upcoming tasks for the next 7 days."


@pytest.mark.asyncio
async def test_view_upcoming_tasks_survives_store_failure() -> None:
    class BrokenStore(MemoryPersistenceStore):
        def query(self, collection, filters, order_by=None, limit=None):
            raise RuntimeError("index missing")

    result = await _executor(BrokenStore()).execute(ToolCall("view_upcoming_tasks", {"days": 3}))
    assert result.success
    assert result.data == []
    assert result.message.startswith("Unable to fetch tasks")


@pytest.mark.asyncio
async def test_handler_crash_becomes_failed_result() -> None:
    class ExplodingStore(MemoryPersistenceStore):
        def insert(self, collection, record):
            raise RuntimeError("disk on fire")

    result = await _executor(ExplodingStore()).execute(ToolCall("create_habit", {"name": "Read"}))
    assert result.success is False
    assert result.error == "RuntimeError"
    assert result.message == "Failed to execute create_habit: Something went wrong. Please try again."


@pytest.mark.asyncio
async def test_handler_returning_non_dict_fails_without_stopping_the_batch() -> None:
    tools = {tool.name: tool for tool in AI_TOOLS}
    registry = ToolRegistry()

    async def broken(_params: dict) -> None:
        return None

    async def habit(params: dict) -> dict:
        return {"message": f"Habit {params['name']} created", "action": "habit_created"}

    registry.register(tools["scan_receipt"], broken)
    registry.register(tools["create_habit"], habit)

    results = await FunctionExecutor(registry).execute_tool_calls(
        [ToolCall("scan_receipt", {}), ToolCall("create_habit", {"name": "Walk"})]
    )

    assert [r.success for r in results] == [False, True]
    assert results[0].message == (
        "Failed to execute scan_receipt: The AI service returned an unexpected response."
    )
    assert "NoneType" in results[0].error
    assert results[1].message == "Habit Walk created"
