import pytest

from errors import ContentRejectedError, ProviderError
from providers.base import is_retryable
from services.retry import RetryPolicy, linear_backoff


class Flaky:
    def __init__(self, errors):
        self.errors = list(errors)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return "ok"


def test_linear_backoff():
    assert [linear_backoff(a, 1.5) for a in (1, 2, 3)] == [1.5, 3.0, 4.5]


@pytest.mark.asyncio
async def test_succeeds_after_transient_failures(sleep_recorder):
    policy = RetryPolicy(max_attempts=3, base_delay=1.0, sleep=sleep_recorder)
    func = Flaky([ProviderError("p", "a"), ProviderError("p", "b")])

    assert await policy.run(func) == "ok"
    assert func.calls == 3
    assert sleep_recorder.delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_raises_last_error_without_sleeping_after_final_attempt(sleep_recorder):
    policy = RetryPolicy(max_attempts=3, base_delay=1.0, sleep=sleep_recorder)
    errors = [ProviderError("p", str(i)) for i in range(3)]
    func = Flaky(errors)

    with pytest.raises(ProviderError) as exc_info:
        await policy.run(func)

    assert exc_info.value.message == "2"
    assert func.calls == 3
    assert sleep_recorder.delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_non_retryable_error_propagates_immediately(sleep_recorder):
    policy = RetryPolicy(max_attempts=3, retry_on=is_retryable, sleep=sleep_recorder)
    func = Flaky([ContentRejectedError("p", "blocked")])

    with pytest.raises(ContentRejectedError):
        await policy.run(func)

    assert func.calls == 1
    assert sleep_recorder.delays == []


@pytest.mark.asyncio
async def test_unexpected_errors_are_not_retried_by_provider_predicate(sleep_recorder):
    policy = RetryPolicy(max_attempts=3, retry_on=is_retryable, sleep=sleep_recorder)
    func = Flaky([KeyError("bug")])

    with pytest.raises(KeyError):
        await policy.run(func)
    assert func.calls == 1


def test_rejects_zero_attempts():
    with pytest.raises(ValueError):
        RetryPolicy(max_attempts=0)
