from datetime import datetime
from pathlib import Path

import pytest

from lifepa.config import get_settings
from lifepa.providers.registry import _reset as _reset_providers
from lifepa.stores import MemoryPersistenceStore, MemorySecretStore

FIXED_NOW = datetime(2025, 1, 1, 9, 30)


@pytest.fixture(autouse=True)
def test_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("APP_DB", str(tmp_path / "test.db"))
    monkeypatch.setenv("AI_PROVIDER", "cohere")
    monkeypatch.setenv("SECRET_STORE_PATH", "")
    monkeypatch.setenv("CHAT_TIMEOUT_SECONDS", "5")
    monkeypatch.setenv("DEFAULT_CURRENCY", "USD")
    get_settings.cache_clear()
    _reset_providers()
    yield
    get_settings.cache_clear()
    _reset_providers()


@pytest.fixture
def secret_store() -> MemorySecretStore:
    return MemorySecretStore()


@pytest.fixture
def store() -> MemoryPersistenceStore:
    return MemoryPersistenceStore()


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


class FakeCompletionClient:
    """Scripted stand-in for the orchestrator's get_completion."""

    def __init__(self, replies: list[str | Exception]) -> None:
        self.replies = list(replies)
        self.calls: list[list] = []

    async def get_completion(self, messages, temperature=None, max_tokens=None) -> str:
        self.calls.append(messages)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def completion_client_factory():
    return FakeCompletionClient
