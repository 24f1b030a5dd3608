"""Tests for error hierarchy."""

import httpx

from lifepa.errors import (
    AuthError,
    ConfigError,
    EmptyResponseError,
    FieldError,
    LifePAError,
    NotInitializedError,
    ProtocolError,
    RateLimitError,
    StoreError,
    TransientNetworkError,
    UnknownToolError,
    ValidationError,
    describe_error,
    provider_error_from_httpx,
    provider_error_from_status,
)


def test_hierarchy() -> None:
    for cls in (
        AuthError,
        RateLimitError,
        TransientNetworkError,
        ProtocolError,
        ValidationError,
        UnknownToolError,
        NotInitializedError,
        ConfigError,
        StoreError,
    ):
        assert issubclass(cls, LifePAError)
    assert issubclass(EmptyResponseError, ProtocolError)


def test_retryable_default() -> None:
    assert LifePAError("test").retryable is False
    assert AuthError("test").retryable is False
    assert RateLimitError("test").retryable is True
    assert TransientNetworkError("test").retryable is True
    assert ProtocolError("test").retryable is False
    assert ValidationError("test").retryable is False


def test_user_message_is_short_and_not_raw() -> None:
    err = RateLimitError("cohere returned HTTP 429: {\"message\":\"too many\"}")
    assert err.user_message == "Rate limit exceeded. Please try again in a moment."
    assert "429" not in err.user_message


def test_validation_error_joins_field_messages() -> None:
    err = ValidationError(
        errors=[FieldError("title", "Title is required"), FieldError("date", "Date is required")]
    )
    assert err.user_message == "Title is required; Date is required"
    assert [e.field for e in err.errors] == ["title", "date"]


def test_status_normalization() -> None:
    assert isinstance(provider_error_from_status("openai", 401, "{}"), AuthError)
    assert isinstance(provider_error_from_status("openai", 403, "{}"), AuthError)
    assert isinstance(provider_error_from_status("openai", 429, "{}"), RateLimitError)
    assert isinstance(provider_error_from_status("openai", 503, "{}"), TransientNetworkError)
    bad = provider_error_from_status("openai", 400, "{}")
    assert isinstance(bad, ProtocolError)
    assert bad.retryable is False


def test_httpx_normalization() -> None:
    request = httpx.Request("POST", "https://api.example.test/chat")
    timeout = provider_error_from_httpx("cohere", httpx.ReadTimeout("slow", request=request))
    connect = provider_error_from_httpx("cohere", httpx.ConnectError("refused", request=request))
    assert isinstance(timeout, TransientNetworkError)
    assert isinstance(connect, TransientNetworkError)


def test_describe_error_foreign_exceptions() -> None:
    assert "API key" in describe_error(RuntimeError("401 unauthorized"), "Cohere")
    assert "Rate limit" in describe_error(RuntimeError("429 too many"))
    assert "timed out" in describe_error(RuntimeError("socket timeout"))
    assert describe_error(RuntimeError("boom")) == "Something went wrong. Please try again."
    assert describe_error(NotInitializedError("x")).startswith("AI service not initialized")


def test_unknown_tool_message() -> None:
    err = UnknownToolError("fly_to_moon")
    assert "Unknown" in str(err)
    assert err.name == "fly_to_moon"
