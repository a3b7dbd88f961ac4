from __future__ import annotations

import httpx
import pytest

from charmline.core.runtime.errors import FailureKind, classify_error, classify_exception, classify_status
from charmline.core.runtime.retries import RetryPolicy, run_with_retry


class _Sleeps:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.mark.asyncio
async def test_retry_stops_when_value_is_accepted():
    seen: list[int] = []
    sleeps = _Sleeps()

    async def flaky(attempt: int) -> str:
        seen.append(attempt)
        return "again" if attempt < 2 else "done"

    out = await run_with_retry(
        flaky,
        policy=RetryPolicy(max_attempts=3, retry_delay_seconds=0.5),
        should_retry=lambda value: value == "again",
        sleep=sleeps,
    )
    assert out == "done"
    assert seen == [1, 2]
    assert sleeps.delays == [0.5]


@pytest.mark.asyncio
async def test_retry_returns_last_value_when_budget_exhausted():
    attempts: list[tuple[int, str]] = []
    sleeps = _Sleeps()

    async def always_busy(attempt: int) -> str:
        return f"busy-{attempt}"

    out = await run_with_retry(
        always_busy,
        policy=RetryPolicy(max_attempts=3, retry_delay_seconds=1.0),
        should_retry=lambda value: value.startswith("busy"),
        on_attempt=lambda n, value: attempts.append((n, value)),
        sleep=sleeps,
    )
    assert out == "busy-3"
    assert [n for n, _ in attempts] == [1, 2, 3]
    assert sleeps.delays == [1.0, 2.0]


def test_linear_backoff_delay():
    policy = RetryPolicy(max_attempts=3, retry_delay_seconds=1.0)
    assert [policy.delay_for(n) for n in (1, 2, 3)] == [1.0, 2.0, 3.0]


@pytest.mark.parametrize(
    "status, kind",
    [
        (200, None),
        (204, None),
        (429, FailureKind.RATE_LIMITED),
        (408, FailureKind.TIMEOUT),
        (500, FailureKind.SERVER_ERROR),
        (503, FailureKind.SERVER_ERROR),
        (401, FailureKind.HTTP_ERROR),
        (404, FailureKind.HTTP_ERROR),
    ],
)
def test_status_classification(status, kind):
    assert classify_status(status) == kind


def test_failure_kinds_split_into_transient_and_permanent():
    transient = {k for k in FailureKind if k.retryable}
    assert transient == {FailureKind.RATE_LIMITED, FailureKind.TIMEOUT, FailureKind.TRANSPORT, FailureKind.SERVER_ERROR}


def test_exception_classification():
    assert classify_exception(httpx.ReadTimeout("slow")) == FailureKind.TIMEOUT
    assert classify_exception(httpx.ConnectError("refused")) == FailureKind.TRANSPORT
    assert classify_exception(ValueError("bad json")) == FailureKind.MALFORMED


def test_classify_error_reads_http_status():
    request = httpx.Request("GET", "https://search.test")
    response = httpx.Response(502, request=request)
    exc = httpx.HTTPStatusError("Server error 502", request=request, response=response)

    info = classify_error(exc, category="search", component="duckduckgo")

    assert info.http_status == 502
    assert info.kind == FailureKind.SERVER_ERROR
    assert info.retryable is True
    assert info.message_signature == "server error #"
