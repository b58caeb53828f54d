"""Resilient dispatch for outbound email operations.

Composes a :class:`RetryExecutor` inside a :class:`CircuitBreaker`: the retry
policy absorbs transient failures within one call, the breaker isolates the
provider across calls once failures persist.

Provider adapters raise :class:`DispatchError` tagged with an
:class:`ErrorKind`; retry decisions are made on that closed set of kinds.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, TypeVar

from mailbridge.core.logging import get_logger
from mailbridge.infrastructure.resilience.circuit_breaker import CircuitBreaker
from mailbridge.infrastructure.resilience.retry import RetryConfig, RetryExecutor

logger = get_logger(__name__)

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Classification of a dispatch failure."""

    NETWORK = "network"
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    TEMPORARY_FAILURE = "temporary_failure"
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    CLIENT_ERROR = "client_error"
    UNKNOWN = "unknown"


RETRYABLE_KINDS = frozenset(
    {
        ErrorKind.NETWORK,
        ErrorKind.TIMEOUT,
        ErrorKind.RATE_LIMITED,
        ErrorKind.SERVER_ERROR,
        ErrorKind.TEMPORARY_FAILURE,
    }
)

# Checked in order; the first match wins.
_MESSAGE_KINDS: tuple[tuple[str, ErrorKind], ...] = (
    ("rate_limit_exceeded", ErrorKind.RATE_LIMITED),
    ("rate limit", ErrorKind.RATE_LIMITED),
    ("temporary_failure", ErrorKind.TEMPORARY_FAILURE),
    ("server_error", ErrorKind.SERVER_ERROR),
    ("timeout", ErrorKind.TIMEOUT),
    ("timed out", ErrorKind.TIMEOUT),
    ("connection", ErrorKind.NETWORK),
)

_TIMEOUT_TYPE_NAMES = frozenset({"TimeoutError", "Timeout", "ReadTimeout", "ConnectTimeout"})
_NETWORK_TYPE_NAMES = frozenset({"NetworkError", "ConnectionError"})


class DispatchError(Exception):
    """A classified failure from an email provider.

    Attributes:
        message: Human-readable error message.
        kind: Closed classification used for retry decisions.
        status: HTTP status reported by the provider, if any.
        retryable: Explicit override; True forces a retry regardless of kind.
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        status: int | None = None,
        retryable: bool | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status = status
        self.retryable = retryable

    def __repr__(self) -> str:
        return f"DispatchError({self.message!r}, kind={self.kind.value}, status={self.status})"


def kind_from_status(status: int | None) -> ErrorKind | None:
    """Map an HTTP status to an error kind, if it determines one."""
    if status is None:
        return None
    if status == 429:
        return ErrorKind.RATE_LIMITED
    if status >= 500:
        return ErrorKind.SERVER_ERROR
    if status in (401, 403):
        return ErrorKind.AUTHENTICATION
    if status in (400, 422):
        return ErrorKind.VALIDATION
    if 400 <= status < 500:
        return ErrorKind.CLIENT_ERROR
    return None


def kind_from_message(message: str) -> ErrorKind | None:
    """Map a provider error message to an error kind, if it names one."""
    lowered = message.lower()
    for needle, kind in _MESSAGE_KINDS:
        if needle in lowered:
            return kind
    return None


def classify_error(error: BaseException, status: int | None = None) -> ErrorKind:
    """Classify an arbitrary exception raised while talking to a provider.

    Used by provider adapters to build a :class:`DispatchError`. Exception
    type wins over status, status wins over message text.
    """
    if isinstance(error, DispatchError):
        return error.kind

    type_name = type(error).__name__
    if isinstance(error, TimeoutError) or type_name in _TIMEOUT_TYPE_NAMES:
        return ErrorKind.TIMEOUT
    if isinstance(error, ConnectionError) or type_name in _NETWORK_TYPE_NAMES:
        return ErrorKind.NETWORK

    return kind_from_status(status) or kind_from_message(str(error)) or ErrorKind.UNKNOWN


def is_retryable_error(error: BaseException | None) -> bool:
    """Decide whether a failed dispatch attempt should be retried.

    Errors that are not :class:`DispatchError` are classified on the fly, so
    a raw timeout or connection error from a client library still retries.
    """
    if error is None:
        return False

    if isinstance(error, DispatchError):
        if error.retryable is True:
            return True
        if error.status is not None and error.status >= 500:
            return True
        return error.kind in RETRYABLE_KINDS

    return classify_error(error) in RETRYABLE_KINDS


@dataclass(frozen=True)
class BreakerConfig:
    """Circuit breaker parameters (timeout in milliseconds)."""

    failure_threshold: int = 5
    recovery_timeout_ms: float = 60000
    success_threshold: int = 3


class ResilientDispatchFacade:
    """Retry and circuit breaker around provider-bound send operations.

    One instance is owned per provider client by the composition root; its
    breaker is the only state shared between concurrent sends.
    """

    def __init__(
        self,
        retry_executor: RetryExecutor | None = None,
        circuit_breaker: CircuitBreaker | None = None,
    ) -> None:
        self.retry_executor = retry_executor or RetryExecutor()
        self.circuit_breaker = circuit_breaker or CircuitBreaker()

    @classmethod
    def from_config(
        cls,
        retry_config: RetryConfig | None = None,
        breaker_config: BreakerConfig | None = None,
    ) -> "ResilientDispatchFacade":
        breaker_config = breaker_config or BreakerConfig()
        return cls(
            retry_executor=RetryExecutor(retry_config),
            circuit_breaker=CircuitBreaker(
                failure_threshold=breaker_config.failure_threshold,
                recovery_timeout_ms=breaker_config.recovery_timeout_ms,
                success_threshold=breaker_config.success_threshold,
            ),
        )

    async def execute_email_operation(
        self,
        operation: Callable[[], Awaitable[T]],
        context: str = "email operation",
    ) -> T:
        """Run an email operation under retry and circuit breaker.

        Args:
            operation: Zero-argument callable returning an awaitable.
            context: Label used in errors and log events.

        Returns:
            The operation's result.

        Raises:
            CircuitOpenError: If the breaker is open.
            DispatchError: Fatal or exhausted provider failures.
        """
        return await self.circuit_breaker.execute(
            lambda: self.retry_executor.execute_with_retry(
                operation,
                is_retryable_error,
                context,
            ),
            context,
        )

    def get_configuration(self) -> dict[str, Any]:
        return {
            "retry": self.retry_executor.config.to_dict(),
            "circuit_breaker": self.circuit_breaker.get_state().to_dict(),
        }

    def reset(self) -> None:
        self.circuit_breaker.reset()
