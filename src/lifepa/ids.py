"""Record identifiers for persisted collections."""

from uuid import uuid4

_PREFIXES = {
    "events": "evt",
    "reminders": "rem",
    "habits": "hab",
    "documents": "doc",
}


def new_record_id(collection: str) -> str:
    """Return a unique id whose prefix names the collection it belongs to."""
    prefix = _PREFIXES.get(collection, collection[:3] or "rec")
    return f"{prefix}_{uuid4().hex}"
