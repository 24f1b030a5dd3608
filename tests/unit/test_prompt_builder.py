from datetime import datetime

from lifepa.models import ChatMessage, ExecutionResult, Role, ToolCall
from lifepa.orchestrator.prompt_builder import (
    build_conversation,
    build_system_message,
    summarize_results,
)

NOW = datetime(2025, 1, 1, 9, 30)


def test_system_message_carries_current_date() -> None:
    message = build_system_message(NOW)
    assert message.role == Role.SYSTEM
    assert "Wednesday, 2025-01-01" in message.content
    assert "09:30" in message.content


def test_conversation_replaces_stale_system_messages() -> None:
    history = [
        ChatMessage.system("old instructions"),
        ChatMessage.user("hi"),
        ChatMessage.assistant("hello"),
    ]
    conversation = build_conversation(history, NOW)
    assert [m.role for m in conversation] == [Role.SYSTEM, Role.USER, Role.ASSISTANT]
    assert "old instructions" not in conversation[0].content


def test_summary_flags_failures() -> None:
    results = [
        ExecutionResult(ToolCall("create_event"), True, "Event created"),
        ExecutionResult(ToolCall("fly"), False, "Unknown function: fly", error="x"),
        ExecutionResult(ToolCall("noop"), True, ""),
    ]
    assert summarize_results(results) == "Event created\n\n⚠️ Unknown function: fly"
