import pytest

from fakes import rate_limit_error
from retries import is_rate_limit_error, retry_on_rate_limit


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


class FlakyCall:
    """Raises the queued exceptions in order, then returns result."""

    def __init__(self, *errors, result="ok"):
        self.errors = list(errors)
        self.result = result
        self.attempts = 0

    async def __call__(self):
        self.attempts += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


class StatusError(Exception):
    def __init__(self, status_code):
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code


def test_is_rate_limit_error():
    assert is_rate_limit_error(rate_limit_error())
    assert is_rate_limit_error(StatusError(429))
    assert not is_rate_limit_error(StatusError(500))
    assert not is_rate_limit_error(RuntimeError("boom"))


@pytest.mark.asyncio
async def test_success_on_first_attempt_does_not_sleep():
    sleep = RecordingSleep()
    call = FlakyCall(result="audio")

    outcome = await retry_on_rate_limit(call, max_attempts=3, retry_delay_ms=30000, sleep=sleep)

    assert outcome.result == "audio"
    assert outcome.attempts == 1
    assert call.attempts == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_rate_limit_exhaustion_propagates_after_max_attempts():
    sleep = RecordingSleep()
    errors = [rate_limit_error() for _ in range(5)]
    call = FlakyCall(*errors)

    with pytest.raises(type(errors[0])) as excinfo:
        await retry_on_rate_limit(call, max_attempts=3, retry_delay_ms=30000, sleep=sleep)

    assert excinfo.value.code == 429
    assert call.attempts == 3
    assert sleep.delays == [30.0, 30.0]


@pytest.mark.asyncio
async def test_rate_limit_once_then_success():
    sleep = RecordingSleep()
    call = FlakyCall(StatusError(429), result="audio")

    outcome = await retry_on_rate_limit(call, max_attempts=3, retry_delay_ms=1500, sleep=sleep)

    assert outcome.result == "audio"
    assert outcome.attempts == 2
    assert sleep.delays == [1.5]


@pytest.mark.asyncio
@pytest.mark.parametrize("max_attempts", [1, 3, 10])
async def test_non_rate_limit_failure_is_not_retried(max_attempts):
    sleep = RecordingSleep()
    call = FlakyCall(StatusError(401))

    with pytest.raises(StatusError):
        await retry_on_rate_limit(call, max_attempts=max_attempts, retry_delay_ms=30000, sleep=sleep)

    assert call.attempts == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_single_attempt_rate_limit_is_fatal():
    sleep = RecordingSleep()
    call = FlakyCall(StatusError(429))

    with pytest.raises(StatusError):
        await retry_on_rate_limit(call, max_attempts=1, retry_delay_ms=10, sleep=sleep)

    assert call.attempts == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_custom_predicate():
    sleep = RecordingSleep()
    call = FlakyCall(ConnectionError("reset"), result="audio")

    outcome = await retry_on_rate_limit(
        call,
        max_attempts=2,
        retry_delay_ms=0,
        is_rate_limited=lambda exc: isinstance(exc, ConnectionError),
        sleep=sleep,
    )

    assert outcome.attempts == 2
    assert sleep.delays == [0.0]


@pytest.mark.asyncio
@pytest.mark.parametrize("max_attempts, retry_delay_ms", [(0, 10), (3, -1)])
async def test_invalid_policy(max_attempts, retry_delay_ms):
    with pytest.raises(ValueError):
        await retry_on_rate_limit(FlakyCall(), max_attempts=max_attempts, retry_delay_ms=retry_delay_ms)
