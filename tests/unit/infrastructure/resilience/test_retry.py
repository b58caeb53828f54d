"""Unit tests for the retry executor."""

import pytest

from mailbridge.infrastructure.resilience import (
    DispatchError,
    ErrorKind,
    RetryConfig,
    RetryExecutor,
    is_retryable_error,
)


class FakeSleep:
    """Records requested delays instead of sleeping."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FlakyOperation:
    """Fails a fixed number of times, then returns a value."""

    def __init__(self, failures: int, error: Exception | None = None, result="ok"):
        self.failures = failures
        self.error = error or DispatchError("server down", ErrorKind.SERVER_ERROR, status=503)
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.result


class NumberedFailures:
    """Always fails, with a distinct error per attempt."""

    def __init__(self):
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        raise DispatchError(f"failure {self.calls}", ErrorKind.SERVER_ERROR, status=503)


class TestRetryConfig:
    def test_defaults(self):
        config = RetryConfig()

        assert config.max_retries == 3
        assert config.base_delay_ms == 1000
        assert config.max_delay_ms == 30000
        assert config.backoff_multiplier == 2.0

    def test_delay_schedule(self):
        config = RetryConfig()

        assert [config.calculate_delay(n) for n in range(6)] == [
            1000,
            2000,
            4000,
            8000,
            16000,
            30000,
        ]

    def test_delay_is_capped(self):
        config = RetryConfig(base_delay_ms=1000, max_delay_ms=1500, backoff_multiplier=3)

        assert config.calculate_delay(0) == 1000
        assert config.calculate_delay(1) == 1500
        assert config.calculate_delay(10) == 1500

    def test_large_attempt_saturates_at_max_delay(self):
        config = RetryConfig(max_retries=2000)

        assert config.calculate_delay(1100) == config.max_delay_ms
        assert config.calculate_delay(2000) == config.max_delay_ms

    def test_large_attempt_with_integer_multiplier(self):
        config = RetryConfig(base_delay_ms=1000.0, backoff_multiplier=3)

        assert config.calculate_delay(5000) == 30000

    def test_zero_base_delay_never_waits(self):
        config = RetryConfig(base_delay_ms=0)

        assert config.calculate_delay(0) == 0
        assert config.calculate_delay(5000) == 0

    @pytest.mark.parametrize(
        "kwargs",
        [{"max_retries": -1}, {"backoff_multiplier": 0.5}, {"base_delay_ms": -1}],
    )
    def test_invalid_config(self, kwargs):
        with pytest.raises(ValueError):
            RetryConfig(**kwargs)


class TestExecuteWithRetry:
    @pytest.mark.asyncio
    async def test_success_first_attempt(self):
        sleep = FakeSleep()
        operation = FlakyOperation(failures=0)

        result = await RetryExecutor(sleep=sleep).execute_with_retry(operation)

        assert result == "ok"
        assert operation.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failures(self):
        sleep = FakeSleep()
        operation = FlakyOperation(failures=2)

        result = await RetryExecutor(sleep=sleep).execute_with_retry(
            operation, is_retryable_error, "send"
        )

        assert result == "ok"
        assert operation.calls == 3
        assert sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhaustion_reraises_last_error(self):
        sleep = FakeSleep()
        operation = NumberedFailures()

        with pytest.raises(DispatchError) as exc_info:
            await RetryExecutor(sleep=sleep).execute_with_retry(operation, is_retryable_error)

        assert str(exc_info.value) == "failure 4"
        assert operation.calls == 4
        assert sleep.delays == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_non_retryable_error_is_raised_immediately(self):
        sleep = FakeSleep()
        operation = FlakyOperation(
            failures=10,
            error=DispatchError("bad address", ErrorKind.VALIDATION, status=422),
        )

        with pytest.raises(DispatchError):
            await RetryExecutor(sleep=sleep).execute_with_retry(operation, is_retryable_error)

        assert operation.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_zero_retries_means_single_attempt(self):
        sleep = FakeSleep()
        operation = FlakyOperation(failures=1)

        with pytest.raises(DispatchError):
            await RetryExecutor(RetryConfig(max_retries=0), sleep=sleep).execute_with_retry(
                operation
            )

        assert operation.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_default_predicate_retries_everything(self):
        operation = FlakyOperation(failures=1, error=ValueError("boom"))

        result = await RetryExecutor(sleep=FakeSleep()).execute_with_retry(operation)

        assert result == "ok"
        assert operation.calls == 2

    @pytest.mark.asyncio
    async def test_many_retries_reraise_last_error(self):
        sleep = FakeSleep()
        operation = NumberedFailures()
        config = RetryConfig(max_retries=1100, base_delay_ms=0)

        with pytest.raises(DispatchError) as exc_info:
            await RetryExecutor(config, sleep=sleep).execute_with_retry(operation)

        assert str(exc_info.value) == "failure 1101"
        assert operation.calls == 1101
