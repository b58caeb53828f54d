"""Retry with exponential backoff for fallible async operations.

Example:
    >>> executor = RetryExecutor(RetryConfig(max_retries=3))
    >>> result = await executor.execute_with_retry(
    ...     lambda: provider.send(message),
    ...     should_retry=is_retryable_error,
    ...     context="send email",
    ... )
"""

import asyncio
from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable, TypeVar

from mailbridge.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def _always_retry(error: BaseException) -> bool:
    return True


@dataclass(frozen=True)
class RetryConfig:
    """Retry policy.

    Attributes:
        max_retries: Retries after the first attempt (total attempts = max_retries + 1).
        base_delay_ms: Delay before the first retry, in milliseconds.
        max_delay_ms: Upper bound on any single delay, in milliseconds.
        backoff_multiplier: Growth factor between consecutive delays.
    """

    max_retries: int = 3
    base_delay_ms: float = 1000
    max_delay_ms: float = 30000
    backoff_multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.base_delay_ms < 0 or self.max_delay_ms < 0:
            raise ValueError("delays must be >= 0")
        if self.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be >= 1")

    def calculate_delay(self, attempt: int) -> float:
        """Delay in milliseconds after the given zero-based failed attempt.

        Large attempt numbers saturate at ``max_delay_ms`` instead of
        overflowing the float range.
        """
        if self.base_delay_ms == 0 or self.backoff_multiplier == 1:
            return min(self.base_delay_ms, self.max_delay_ms)
        try:
            delay = self.base_delay_ms * self.backoff_multiplier**attempt
        except OverflowError:
            return self.max_delay_ms
        return min(delay, self.max_delay_ms)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class RetryExecutor:
    """Runs an operation until it succeeds, fails fatally, or runs out of attempts.

    Attempts are strictly sequential; the executor never has two invocations
    of the same operation in flight.
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the executor.

        Args:
            config: Retry policy. Defaults to ``RetryConfig()``.
            sleep: Awaitable sleep taking seconds.
        """
        self.config = config or RetryConfig()
        self._sleep = sleep

    async def execute_with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        should_retry: Callable[[BaseException], bool] = _always_retry,
        context: str = "operation",
    ) -> T:
        """Execute an operation with retries.

        Args:
            operation: Zero-argument callable returning an awaitable.
            should_retry: Decides whether a failure is worth another attempt.
            context: Label used in log events.

        Returns:
            The result of the first successful attempt.

        Raises:
            Exception: The non-retryable error, or the last error once all
                attempts are exhausted.
        """
        total_attempts = self.config.max_retries + 1

        for attempt in range(total_attempts):
            logger.debug(
                "Retry attempt",
                context=context,
                attempt=attempt + 1,
                total_attempts=total_attempts,
            )
            try:
                result = await operation()
            except Exception as e:
                logger.warning(
                    "Operation attempt failed",
                    context=context,
                    attempt=attempt + 1,
                    error=str(e),
                    error_type=type(e).__name__,
                )

                if attempt + 1 >= total_attempts:
                    logger.error(
                        "Operation exhausted all attempts",
                        context=context,
                        total_attempts=total_attempts,
                    )
                    raise

                if not should_retry(e):
                    logger.info("Operation error is not retryable", context=context)
                    raise

                delay_ms = self.config.calculate_delay(attempt)
                logger.info("Waiting before retry", context=context, delay_ms=delay_ms)
                await self._sleep(delay_ms / 1000)
                continue

            if attempt > 0:
                logger.info(
                    "Operation succeeded after retry",
                    context=context,
                    attempts=attempt + 1,
                )
            return result

        # range() is never empty because total_attempts >= 1
        raise AssertionError("unreachable")
