"""Circuit breaker pattern for outbound dispatch.

Stops calling a provider that keeps failing and fails fast instead, until a
recovery timeout has passed.

States:
    CLOSED: Normal operation, calls pass through
    OPEN: Failing fast, calls rejected without invoking the operation
    HALF_OPEN: One probe call allowed to test recovery

Example:
    >>> breaker = CircuitBreaker(failure_threshold=5, recovery_timeout_ms=60000)
    >>> result = await breaker.execute(lambda: provider.send(message), "send email")
"""

import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, TypeVar

from mailbridge.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF_OPEN"


class CircuitOpenError(Exception):
    """Raised when the circuit is open and the call was not attempted."""

    def __init__(self, context: str = "operation") -> None:
        self.context = context
        super().__init__(f"Circuit breaker is OPEN for {context}")


@dataclass(frozen=True)
class CircuitSnapshot:
    """Point-in-time view of the breaker state."""

    state: CircuitState
    failures: int
    last_failure_time: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "failures": self.failures,
            "last_failure_time": self.last_failure_time,
        }


class CircuitBreaker:
    """Three-state failure isolation guard.

    State is only mutated by :meth:`execute`, :meth:`on_success`,
    :meth:`on_failure` and :meth:`reset`, always under ``_lock``. The lock is
    never held while the protected operation runs.

    Attributes:
        failure_threshold: Consecutive failures that trip the breaker.
        recovery_timeout_ms: Time the breaker stays OPEN before a probe.
        success_threshold: Accepted for configuration compatibility; a single
            successful probe closes the circuit.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout_ms: float = 60000,
        success_threshold: int = 3,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be >= 1")
        self.failure_threshold = failure_threshold
        self.recovery_timeout_ms = recovery_timeout_ms
        self.success_threshold = success_threshold
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failures = 0
        self._last_failure_time = 0.0
        self._probe_in_flight = False
        self._lock = threading.Lock()

    @property
    def state(self) -> CircuitState:
        with self._lock:
            return self._state

    @property
    def failure_count(self) -> int:
        with self._lock:
            return self._failures

    def _recovery_elapsed(self) -> bool:
        elapsed_ms = (self._clock() - self._last_failure_time) * 1000
        return elapsed_ms >= self.recovery_timeout_ms

    def _before_call(self, context: str) -> None:
        with self._lock:
            if self._state == CircuitState.OPEN:
                if not self._recovery_elapsed():
                    raise CircuitOpenError(context)
                self._state = CircuitState.HALF_OPEN
                self._probe_in_flight = False
                logger.info("Circuit breaker moving to HALF_OPEN", context=context)

            if self._state == CircuitState.HALF_OPEN:
                # Only one probe at a time while recovery is being tested
                if self._probe_in_flight:
                    raise CircuitOpenError(context)
                self._probe_in_flight = True

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        context: str = "operation",
    ) -> T:
        """Run an operation through the breaker.

        Args:
            operation: Zero-argument callable returning an awaitable.
            context: Label used in errors and log events.

        Returns:
            The operation's result.

        Raises:
            CircuitOpenError: If the circuit is open; the operation is not invoked.
            Exception: Whatever the operation raised, after it was recorded.
        """
        self._before_call(context)

        try:
            result = await operation()
        except Exception:
            self.on_failure(context)
            raise
        except BaseException:
            # Cancelled: says nothing about the provider, just free the probe slot
            self._release_probe()
            raise

        self.on_success(context)
        return result

    def _release_probe(self) -> None:
        with self._lock:
            self._probe_in_flight = False

    def on_success(self, context: str = "operation") -> None:
        """Record a successful call."""
        with self._lock:
            self._failures = 0
            self._probe_in_flight = False
            if self._state == CircuitState.HALF_OPEN:
                self._state = CircuitState.CLOSED
                logger.info("Circuit breaker CLOSED", context=context)

    def on_failure(self, context: str = "operation") -> None:
        """Record a failed call."""
        with self._lock:
            self._failures += 1
            self._last_failure_time = self._clock()
            self._probe_in_flight = False

            if self._state == CircuitState.HALF_OPEN or self._failures >= self.failure_threshold:
                if self._state != CircuitState.OPEN:
                    logger.warning(
                        "Circuit breaker OPENED",
                        context=context,
                        failures=self._failures,
                    )
                self._state = CircuitState.OPEN

    def get_state(self) -> CircuitSnapshot:
        """Return a consistent snapshot of state, failures and last failure time."""
        with self._lock:
            return CircuitSnapshot(
                state=self._state,
                failures=self._failures,
                last_failure_time=self._last_failure_time,
            )

    def reset(self) -> None:
        """Force the circuit CLOSED and clear counters, from any state."""
        with self._lock:
            self._state = CircuitState.CLOSED
            self._failures = 0
            self._last_failure_time = 0.0
            self._probe_in_flight = False
        logger.info("Circuit breaker reset")
