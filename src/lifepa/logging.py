"""structlog setup: console output in dev, JSON in prod, credentials masked."""

import logging
import re
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog

_SECRET_FIELDS = re.compile(
    r"api_key|credential|authorization|access_token|secret", re.IGNORECASE
)
_BEARER_RE = re.compile(r"(Bearer\s+)[A-Za-z0-9._\-]+")
_MASK = "***"

# Request lines from these libraries add nothing over the adapter logs.
_NOISY_LOGGERS = ("httpx", "httpcore")


def redact_secrets(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Mask credential-looking fields and bearer tokens before rendering."""
    for key in list(event_dict):
        if _SECRET_FIELDS.search(key) and event_dict[key]:
            event_dict[key] = _MASK
    event = event_dict.get("event")
    if isinstance(event, str):
        event_dict["event"] = _BEARER_RE.sub(r"\1" + _MASK, event)
    return event_dict


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_secrets,
    ]


def configure_logging(level: str, json_output: bool | None = None) -> None:
    """Route stdlib logging through structlog.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR).
        json_output: Force JSON output. If None, JSON is used when APP_ENV is prod.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    if json_output is None:
        from lifepa.config import get_settings

        json_output = get_settings().app_env == "prod"

    shared = _shared_processors()
    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def bind_context(**kwargs: object) -> None:
    """Attach ``provider``, ``user_id`` and similar keys to subsequent log lines."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
