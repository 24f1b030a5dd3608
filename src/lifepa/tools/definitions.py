"""The neutral tool set every provider adapter must honor."""

from lifepa.models import ParamType, ToolDefinition, ToolParameter

EVENT_CATEGORIES = (
    "work",
    "personal",
    "health",
    "finance",
    "social",
    "travel",
    "education",
    "entertainment",
    "other",
)

HABIT_FREQUENCIES = ("daily", "weekly", "custom")

CREATE_EVENT = ToolDefinition(
    name="create_event",
    description="Create a new calendar event with a title, date, time, and optional description",
    parameters={
        "title": ToolParameter(ParamType.STRING, "The title/name of the event", required=True),
        "date": ToolParameter(
            ParamType.STRING, "The date of the event in YYYY-MM-DD format", required=True
        ),
        "time": ToolParameter(
            ParamType.STRING, "The time of the event in HH:MM format (24-hour)", required=True
        ),
        "description": ToolParameter(
            ParamType.STRING, "Optional description or notes about the event"
        ),
        "category": ToolParameter(
            ParamType.STRING, f"Event category: {', '.join(EVENT_CATEGORIES)}"
        ),
    },
)

SET_REMINDER = ToolDefinition(
    name="set_reminder",
    description="Set a reminder for a specific date and time",
    parameters={
        "title": ToolParameter(ParamType.STRING, "What to be reminded about", required=True),
        "date": ToolParameter(
            ParamType.STRING, "The date for the reminder in YYYY-MM-DD format", required=True
        ),
        "time": ToolParameter(
            ParamType.STRING, "The time for the reminder in HH:MM format (24-hour)", required=True
        ),
        "notes": ToolParameter(ParamType.STRING, "Optional additional notes for the reminder"),
    },
)

VIEW_UPCOMING_TASKS = ToolDefinition(
    name="view_upcoming_tasks",
    description=(
        "View upcoming events and reminders. Use this when user asks to see their "
        "schedule, tasks, or what they have coming up."
    ),
    parameters={
        "days": ToolParameter(ParamType.NUMBER, "Number of days ahead to look (default 7)"),
    },
)

SCAN_RECEIPT = ToolDefinition(
    name="scan_receipt",
    description="Trigger the receipt scanning feature to capture and save receipt information",
)

CREATE_HABIT = ToolDefinition(
    name="create_habit",
    description="Start tracking a new habit with an optional cue, routine and reward",
    parameters={
        "name": ToolParameter(ParamType.STRING, "Short name of the habit", required=True),
        "description": ToolParameter(ParamType.STRING, "Optional longer description"),
        "cue": ToolParameter(ParamType.STRING, "Trigger for the habit, e.g. 'after coffee'"),
        "routine": ToolParameter(ParamType.STRING, "The action to perform"),
        "reward": ToolParameter(ParamType.STRING, "What the user gets from doing it"),
        "frequency": ToolParameter(
            ParamType.STRING, f"How often: {', '.join(HABIT_FREQUENCIES)} (default daily)"
        ),
    },
)

AI_TOOLS: tuple[ToolDefinition, ...] = (
    CREATE_EVENT,
    SET_REMINDER,
    VIEW_UPCOMING_TASKS,
    SCAN_RECEIPT,
    CREATE_HABIT,
)
