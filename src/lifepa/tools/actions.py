"""Side-effecting app actions behind the neutral tool set."""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from lifepa.stores import PersistenceStore
from lifepa.tools.definitions import (
    CREATE_EVENT,
    CREATE_HABIT,
    SCAN_RECEIPT,
    SET_REMINDER,
    VIEW_UPCOMING_TASKS,
)
from lifepa.tools.natural import parse_natural_date, parse_natural_time
from lifepa.tools.registry import ToolRegistry
from lifepa.tools.validation import (
    coerce_days,
    sanitize_string,
    validate_event_params,
    validate_habit_params,
    validate_reminder_params,
)

logger = logging.getLogger(__name__)

TASK_QUERY_LIMIT = 20


def _schedule(params: dict[str, Any], now: datetime) -> dict[str, Any]:
    """Copy ``params`` with natural date/time fragments made absolute."""
    normalized = dict(params)
    if isinstance(normalized.get("date"), str):
        normalized["date"] = parse_natural_date(normalized["date"], now)
    if isinstance(normalized.get("time"), str):
        normalized["time"] = parse_natural_time(normalized["time"])
    return normalized


class AppActions:
    """Tool handlers bound to one user, one store and one clock."""

    def __init__(
        self,
        store: PersistenceStore,
        user_id: str,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.user_id = user_id
        self.clock = clock

    async def create_event(self, params: dict[str, Any]) -> dict[str, Any]:
        now = self.clock()
        normalized = _schedule(params, now)
        validate_event_params(normalized)
        title = sanitize_string(normalized["title"])
        record = {
            "user_id": self.user_id,
            "title": title,
            "date": normalized["date"],
            "time": normalized["time"],
            "datetime": f"{normalized['date']}T{normalized['time']}:00",
            "description": sanitize_string(normalized.get("description")),
            "category": str(normalized.get("category") or "other").lower(),
            "created_at": now.isoformat(),
            "created_by": "ai_assistant",
        }
        event_id = self.store.insert("events", record)
        logger.info("event created id=%s date=%s", event_id, record["date"])
        return {
            "message": f'Event "{title}" created for {record["date"]} at {record["time"]}',
            "data": {**record, "id": event_id},
        }

    async def set_reminder(self, params: dict[str, Any]) -> dict[str, Any]:
        now = self.clock()
        normalized = _schedule(params, now)
        validate_reminder_params(normalized)
        title = sanitize_string(normalized["title"])
        record = {
            "user_id": self.user_id,
            "title": title,
            "date": normalized["date"],
            "time": normalized["time"],
            "datetime": f"{normalized['date']}T{normalized['time']}:00",
            "notes": sanitize_string(normalized.get("notes")),
            "completed": False,
            "created_at": now.isoformat(),
            "created_by": "ai_assistant",
        }
        reminder_id = self.store.insert("reminders", record)
        logger.info("reminder created id=%s date=%s", reminder_id, record["date"])
        return {
            "message": f'Reminder "{title}" set for {record["date"]} at {record["time"]}',
            "data": {**record, "id": reminder_id},
        }

    async def view_upcoming_tasks(self, params: dict[str, Any]) -> dict[str, Any]:
        days = coerce_days(params.get("days"))
        now = self.clock()
        start = now.strftime("%Y-%m-%dT%H:%M:%S")
        end = (now + timedelta(days=days)).strftime("%Y-%m-%dT%H:%M:%S")
        window = [
            ("user_id", "==", self.user_id),
            ("datetime", ">=", start),
            ("datetime", "<=", end),
        ]
        try:
            events = self.store.query(
                "events", window, order_by="datetime", limit=TASK_QUERY_LIMIT
            )
            reminders = self.store.query(
                "reminders",
                [*window, ("completed", "==", False)],
                order_by="datetime",
                limit=TASK_QUERY_LIMIT,
            )
        except Exception:
            logger.warning("upcoming task query failed", exc_info=True)
            return {
                "message": (
                    "Unable to fetch tasks at this moment. "
                    "Please try viewing your tasks in the app."
                ),
                "data": [],
            }

        tasks = [{**e, "type": "event"} for e in events]
        tasks += [{**r, "type": "reminder"} for r in reminders]
        tasks.sort(key=lambda t: str(t.get("datetime", "")))
        if not tasks:
            return {"message": f"You have no upcoming tasks for the next {days} days.", "data": []}
        lines = []
        for task in tasks:
            marker = "📅" if task["type"] == "event" else "⏰"
            when = f"{task.get('date')} at {task.get('time')}"
            lines.append(f"{marker} {task.get('title', '')} - {when}")
        summary = "\n".join(lines)
        return {
            "message": f"Here are your upcoming tasks for the next {days} days:\n\n{summary}",
            "data": tasks,
        }

    async def scan_receipt(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"message": "Opening receipt scanner...", "action": "navigate_to_scan"}

    async def create_habit(self, params: dict[str, Any]) -> dict[str, Any]:
        validate_habit_params(params)
        now = self.clock()
        name = sanitize_string(params["name"])
        record = {
            "user_id": self.user_id,
            "name": name,
            "description": sanitize_string(params.get("description")),
            "cue": sanitize_string(params.get("cue")),
            "routine": sanitize_string(params.get("routine")),
            "reward": sanitize_string(params.get("reward")),
            "target_frequency": str(params.get("frequency") or "daily").lower(),
            "progress": {
                "current_streak": 0,
                "longest_streak": 0,
                "total_completions": 0,
            },
            "is_active": True,
            "created_at": now.isoformat(),
        }
        habit_id = self.store.insert("habits", record)
        logger.info("habit created id=%s", habit_id)
        return {
            "message": f'Habit "{name}" created ({record["target_frequency"]})',
            "data": {**record, "id": habit_id},
        }


def build_app_registry(
    store: PersistenceStore,
    user_id: str,
    *,
    clock: Callable[[], datetime] = datetime.now,
) -> ToolRegistry:
    actions = AppActions(store, user_id, clock=clock)
    registry = ToolRegistry()
    registry.register(CREATE_EVENT, actions.create_event)
    registry.register(SET_REMINDER, actions.set_reminder)
    registry.register(VIEW_UPCOMING_TASKS, actions.view_upcoming_tasks)
    registry.register(SCAN_RECEIPT, actions.scan_receipt)
    registry.register(CREATE_HABIT, actions.create_habit)
    return registry
