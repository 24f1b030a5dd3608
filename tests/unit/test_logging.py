import logging

import structlog

from lifepa.ids import new_record_id
from lifepa.logging import bind_context, clear_context, configure_logging, redact_secrets


def test_redact_secrets_masks_fields_and_bearer_tokens() -> None:
    event = redact_secrets(
        None,
        "info",
        {
            "event": "calling with Authorization: Bearer sk-abc.123",
            "api_key": "sk-abc",
            "max_tokens": 500,
            "provider": "openai",
        },
    )
    assert event["event"] == "calling with Authorization: Bearer ***"
    assert event["api_key"] == "***"
    assert event["max_tokens"] == 500
    assert event["provider"] == "openai"


def test_configure_logging_installs_single_handler() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        configure_logging("debug", json_output=True)
        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
        structlog.reset_defaults()


def test_bound_context_is_merged_and_cleared() -> None:
    bind_context(provider="cohere")
    assert structlog.contextvars.get_contextvars() == {"provider": "cohere"}
    clear_context()
    assert structlog.contextvars.get_contextvars() == {}


def test_record_ids_are_prefixed_by_collection() -> None:
    assert new_record_id("events").startswith("evt_")
    assert new_record_id("documents").startswith("doc_")
    assert new_record_id("notes").startswith("not_")
    assert new_record_id("events") != new_record_id("events")
