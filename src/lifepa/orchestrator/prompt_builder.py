"""System prompt and conversation assembly helpers."""

from __future__ import annotations

from datetime import datetime

from lifepa.models import ChatMessage, ExecutionResult, Role
from lifepa.tools.natural import datetime_context


def build_system_message(now: datetime) -> ChatMessage:
    ctx = datetime_context(now)
    return ChatMessage.system(
        "You are a helpful personal assistant. "
        f"Today is {ctx['day_of_week']}, {ctx['today']}, and the current time is "
        f"{ctx['current_time']}. When users ask for dates like \"tomorrow\" or "
        "\"next Monday\", calculate the correct date based on today being "
        f"{ctx['today']}."
    )


def build_conversation(history: list[ChatMessage], now: datetime) -> list[ChatMessage]:
    """Prefix ``history`` with a fresh system message, dropping stale ones."""
    turns = [m for m in history if m.role != Role.SYSTEM]
    return [build_system_message(now), *turns]


def summarize_results(results: list[ExecutionResult]) -> str:
    lines = []
    for result in results:
        prefix = "" if result.success else "⚠️ "
        if result.message:
            lines.append(f"{prefix}{result.message}")
    return "\n\n".join(lines)
