"""Retry-with-backoff and timeout wrappers for outbound calls."""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from lifepa.errors import AuthError, LifePAError, TransientNetworkError, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

NON_RETRYABLE_PATTERNS = (
    "invalid api key",
    "authentication failed",
    "unauthorized",
    "forbidden",
    "not found",
    "validation",
    "invalid credential",
    "bad request",
)

RETRYABLE_PATTERNS = (
    "network",
    "timeout",
    "connection",
    "econnrefused",
    "enotfound",
    "etimedout",
    "429",
    "500",
    "502",
    "503",
    "504",
)


def is_retryable_error(exc: BaseException) -> bool:
    """Classify ``exc`` as transient.

    Taxonomy errors answer with their own flag. Foreign errors are matched
    against message patterns, and anything unmatched is retried.
    """
    if isinstance(exc, LifePAError):
        return exc.retryable
    message = str(exc).lower()
    if any(pattern in message for pattern in NON_RETRYABLE_PATTERNS):
        return False
    if any(pattern in message for pattern in RETRYABLE_PATTERNS):
        return True
    return True


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    max_retries: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 10000
    classifier: Callable[[BaseException], bool] = field(default=is_retryable_error)

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValidationError("max_retries must be >= 0")
        if self.base_delay_ms <= 0:
            raise ValidationError("base_delay_ms must be > 0")
        if self.max_delay_ms < self.base_delay_ms:
            raise ValidationError("max_delay_ms must be >= base_delay_ms")

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        from lifepa.config import get_settings

        settings = get_settings()
        return cls(
            max_retries=settings.retry_max_retries,
            base_delay_ms=settings.retry_base_delay_ms,
            max_delay_ms=settings.retry_max_delay_ms,
        )


OnRetry = Callable[[int, int, float, BaseException], None]


def calculate_backoff(attempt: int, policy: RetryPolicy) -> float:
    """Delay in milliseconds before retry number ``attempt + 1``."""
    jitter = random.uniform(0.5, 1.5)
    return min(policy.base_delay_ms * (2**attempt) * jitter, float(policy.max_delay_ms))


async def retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    on_retry: OnRetry | None = None,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds or the policy gives up.

    The operation is attempted at most ``max_retries + 1`` times. The final
    error is re-raised unchanged. ``AuthError`` is never retried.
    """
    policy = policy or RetryPolicy()
    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as exc:
            if isinstance(exc, AuthError) or not policy.classifier(exc):
                raise
            if attempt >= policy.max_retries:
                raise
            delay_ms = calculate_backoff(attempt, policy)
            logger.info(
                "retrying after error attempt=%s/%s delay_ms=%.0f error=%s",
                attempt + 1,
                policy.max_retries,
                delay_ms,
                exc,
            )
            if on_retry is not None:
                on_retry(attempt + 1, policy.max_retries, delay_ms, exc)
            await sleep(delay_ms / 1000)
            attempt += 1


async def with_timeout(
    operation: Awaitable[T], timeout_seconds: float, message: str = "Operation timed out"
) -> T:
    """Race ``operation`` against a timer; the loser is cancelled."""
    try:
        return await asyncio.wait_for(operation, timeout=timeout_seconds)
    except TimeoutError as exc:
        raise TransientNetworkError(
            f"{message} after {timeout_seconds}s",
            user_message="Request timed out. Please try again.",
        ) from exc
