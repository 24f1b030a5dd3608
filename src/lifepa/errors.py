"""LifePA exception hierarchy.

All LifePA-specific exceptions inherit from LifePAError, so callers can catch
one base class. Each error carries a ``retryable`` flag read by the resilience
engine and a short ``user_message`` that is safe to show to end users. Raw
vendor bodies go to the log, never into ``user_message``.
"""

import logging
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)

_DEFAULT_USER_MESSAGE = "Something went wrong. Please try again."


class LifePAError(Exception):
    """Base exception for all LifePA errors."""

    default_user_message = _DEFAULT_USER_MESSAGE

    def __init__(
        self,
        message: str = "",
        *,
        retryable: bool = False,
        user_message: str | None = None,
    ) -> None:
        super().__init__(message)
        self.retryable = retryable
        self.user_message = user_message or self.default_user_message


class AuthError(LifePAError):
    """Invalid or revoked credential. Never retried."""

    default_user_message = "Invalid API key. Please check your settings."


class RateLimitError(LifePAError):
    default_user_message = "Rate limit exceeded. Please try again in a moment."

    def __init__(
        self, message: str = "", *, retryable: bool = True, user_message: str | None = None
    ) -> None:
        super().__init__(message, retryable=retryable, user_message=user_message)


class TransientNetworkError(LifePAError):
    """Network failure, timeout or server-side error."""

    default_user_message = "Network error. Please check your connection and try again."

    def __init__(
        self, message: str = "", *, retryable: bool = True, user_message: str | None = None
    ) -> None:
        super().__init__(message, retryable=retryable, user_message=user_message)


class ProtocolError(LifePAError):
    """Malformed, unexpected or rejected provider exchange."""

    default_user_message = "The AI service returned an unexpected response."


class EmptyResponseError(ProtocolError):
    default_user_message = "The AI service returned an empty response."


@dataclass(slots=True)
class FieldError:
    field: str
    message: str


class ValidationError(LifePAError):
    """Caller or tool-call input is invalid."""

    default_user_message = "Some of the provided details are invalid."

    def __init__(
        self,
        message: str = "",
        *,
        errors: list[FieldError] | None = None,
        user_message: str | None = None,
    ) -> None:
        self.errors = list(errors or [])
        if user_message is None and self.errors:
            user_message = "; ".join(err.message for err in self.errors)
        super().__init__(message or "validation failed", user_message=user_message)


class UnknownToolError(LifePAError):
    default_user_message = "Unknown function requested."

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown function: {name}", user_message=f"Unknown function: {name}")
        self.name = name


class NotInitializedError(LifePAError):
    default_user_message = "AI service not initialized. Please add your API key in Settings."


class ConfigError(LifePAError):
    """Invalid or missing configuration."""


class StoreError(LifePAError):
    """Error reading from or writing to a store collaborator."""

    default_user_message = "Could not save your changes. Please try again."


_TRUNCATE = 240


def provider_error_from_status(provider: str, status: int, body: str = "") -> LifePAError:
    """Normalize an HTTP failure from ``provider`` into the error taxonomy."""
    logger.warning(
        "%s request failed status=%s body=%s", provider, status, body[:_TRUNCATE]
    )
    message = f"{provider} returned HTTP {status}"
    if status in {401, 403}:
        return AuthError(message)
    if status == 429:
        return RateLimitError(message)
    if status >= 500:
        return TransientNetworkError(message)
    if status in {400, 404, 422}:
        return ProtocolError(message, user_message="Bad request. Please try again.")
    return ProtocolError(message)


def provider_error_from_httpx(provider: str, exc: httpx.HTTPError) -> LifePAError:
    if isinstance(exc, httpx.HTTPStatusError):
        return provider_error_from_status(
            provider, exc.response.status_code, exc.response.text
        )
    if isinstance(exc, httpx.TimeoutException):
        return TransientNetworkError(
            f"{provider} request timeout: {exc}",
            user_message="Request timed out. Please try again.",
        )
    logger.warning("%s network error: %s", provider, exc)
    return TransientNetworkError(f"{provider} network error: {exc}")


def describe_error(exc: BaseException, service: str = "AI") -> str:
    """Return a short, non-technical message describing ``exc``."""
    if isinstance(exc, LifePAError):
        return exc.user_message
    message = str(exc).lower()
    if "api key" in message or "unauthorized" in message or "401" in message:
        return f"Invalid {service} API key. Please check your settings."
    if "rate limit" in message or "429" in message:
        return "Rate limit exceeded. Please try again in a moment."
    if "timeout" in message or "timed out" in message:
        return "Request timed out. Please try again."
    if "network" in message or "connection" in message:
        return "Network error. Please check your connection and try again."
    if "quota" in message:
        return f"{service} quota exceeded. Please check your account."
    return _DEFAULT_USER_MESSAGE
