"""Resilience primitives for outbound calls: retry, circuit breaker, dispatch facade."""

from mailbridge.infrastructure.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitOpenError,
    CircuitSnapshot,
    CircuitState,
)
from mailbridge.infrastructure.resilience.dispatch import (
    RETRYABLE_KINDS,
    BreakerConfig,
    DispatchError,
    ErrorKind,
    ResilientDispatchFacade,
    classify_error,
    is_retryable_error,
    kind_from_message,
    kind_from_status,
)
from mailbridge.infrastructure.resilience.retry import RetryConfig, RetryExecutor

__all__ = [
    "RETRYABLE_KINDS",
    "BreakerConfig",
    "CircuitBreaker",
    "CircuitOpenError",
    "CircuitSnapshot",
    "CircuitState",
    "DispatchError",
    "ErrorKind",
    "ResilientDispatchFacade",
    "RetryConfig",
    "RetryExecutor",
    "classify_error",
    "is_retryable_error",
    "kind_from_message",
    "kind_from_status",
]
