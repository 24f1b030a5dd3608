import asyncio

import pytest

from lifepa.errors import AuthError, ProtocolError, RateLimitError, TransientNetworkError
from lifepa.errors import ValidationError
from lifepa.resilience import (
    RetryPolicy,
    calculate_backoff,
    is_retryable_error,
    retry,
    with_timeout,
)


class _Recorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def sleep(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.mark.asyncio
@pytest.mark.parametrize("max_retries", [0, 1, 3, 5])
async def test_permanent_retryable_failure_attempted_n_plus_one(max_retries: int) -> None:
    attempts = 0
    failure = TransientNetworkError("network down")

    async def op() -> str:
        nonlocal attempts
        attempts += 1
        raise failure

    recorder = _Recorder()
    policy = RetryPolicy(max_retries=max_retries, base_delay_ms=10, max_delay_ms=100)
    with pytest.raises(TransientNetworkError) as exc_info:
        await retry(op, policy, sleep=recorder.sleep)
    assert attempts == max_retries + 1
    assert exc_info.value is failure
    assert len(recorder.delays) == max_retries


@pytest.mark.asyncio
async def test_auth_error_attempted_once_even_if_classifier_says_retry() -> None:
    attempts = 0

    async def op() -> str:
        nonlocal attempts
        attempts += 1
        raise AuthError("invalid api key")

    policy = RetryPolicy(max_retries=5, classifier=lambda _exc: True)
    with pytest.raises(AuthError):
        await retry(op, policy, sleep=_Recorder().sleep)
    assert attempts == 1


@pytest.mark.asyncio
async def test_recovers_and_reports_each_retry() -> None:
    outcomes: list[Exception | str] = [RateLimitError("429"), RateLimitError("429"), "ok"]
    seen: list[tuple[int, int]] = []

    async def op() -> str:
        item = outcomes.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def on_retry(attempt: int, max_retries: int, delay_ms: float, exc: BaseException) -> None:
        seen.append((attempt, max_retries))
        assert 0 < delay_ms <= 10000

    result = await retry(op, RetryPolicy(), on_retry, sleep=_Recorder().sleep)
    assert result == "ok"
    assert seen == [(1, 3), (2, 3)]


@pytest.mark.asyncio
async def test_non_retryable_protocol_error_not_retried() -> None:
    attempts = 0

    async def op() -> str:
        nonlocal attempts
        attempts += 1
        raise ProtocolError("bad request")

    with pytest.raises(ProtocolError):
        await retry(op, RetryPolicy(), sleep=_Recorder().sleep)
    assert attempts == 1


def test_backoff_is_jittered_and_capped(monkeypatch: pytest.MonkeyPatch) -> None:
    policy = RetryPolicy(base_delay_ms=1000, max_delay_ms=10000)
    monkeypatch.setattr("lifepa.resilience.random.uniform", lambda a, b: b)
    assert calculate_backoff(0, policy) == 1500
    assert calculate_backoff(1, policy) == 3000
    assert calculate_backoff(5, policy) == 10000
    monkeypatch.setattr("lifepa.resilience.random.uniform", lambda a, b: a)
    assert calculate_backoff(0, policy) == 500


def test_backoff_stays_in_jitter_window() -> None:
    policy = RetryPolicy(base_delay_ms=100, max_delay_ms=100000)
    for attempt in range(4):
        for _ in range(20):
            delay = calculate_backoff(attempt, policy)
            assert 100 * 2**attempt * 0.5 <= delay <= 100 * 2**attempt * 1.5


@pytest.mark.parametrize(
    ("message", "expected"),
    [
        ("Invalid API key provided", False),
        ("403 Forbidden", False),
        ("Resource not found", False),
        ("validation failed for field", False),
        ("Bad Request", False),
        ("Network request failed", True),
        ("ETIMEDOUT", True),
        ("HTTP 503 service unavailable", True),
        ("something odd happened", True),
    ],
)
def test_foreign_error_classification(message: str, expected: bool) -> None:
    assert is_retryable_error(RuntimeError(message)) is expected


def test_policy_bounds_validated() -> None:
    with pytest.raises(ValidationError):
        RetryPolicy(max_retries=-1)
    with pytest.raises(ValidationError):
        RetryPolicy(base_delay_ms=0)
    with pytest.raises(ValidationError):
        RetryPolicy(base_delay_ms=2000, max_delay_ms=1000)


@pytest.mark.asyncio
async def test_with_timeout_rejects_slow_operation() -> None:
    async def slow() -> str:
        await asyncio.sleep(10)
        return "late"

    with pytest.raises(TransientNetworkError) as exc_info:
        await with_timeout(slow(), 0.01, message="chat timed out")
    assert "timed out" in str(exc_info.value)
    assert exc_info.value.user_message == "Request timed out. Please try again."


@pytest.mark.asyncio
async def test_with_timeout_passes_result_through() -> None:
    async def fast() -> int:
        return 7

    assert await with_timeout(fast(), 1) == 7
