"""Circuit breaker for AI provider calls.

A provider whose circuit is OPEN is treated as unreachable: the extraction
orchestrator goes straight to the fallback provider and evaluation goes
straight to the next provider or the fallback evaluator, instead of
waiting for another timeout.

States:
- CLOSED: Normal operation, requests pass through
- OPEN: Too many failures, requests blocked immediately
- HALF_OPEN: Testing if provider recovered, limited requests allowed

Example:
    >>> breaker = provider_breakers.get("gemini")
    >>> if breaker.allow_request():
    ...     ...
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar

from answer_eval.core.config import (
    PROVIDER_FAILURE_THRESHOLD,
    PROVIDER_RESET_TIMEOUT_SECONDS,
)
from answer_eval.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Failing, reject requests
    HALF_OPEN = "half_open"  # Testing recovery


@dataclass
class CircuitBreakerConfig:
    """Configuration for circuit breaker.

    Attributes:
        failure_threshold: Number of consecutive failures before opening circuit
        timeout_seconds: How long to keep circuit open before attempting reset
        success_threshold: Number of successes in HALF_OPEN to close circuit
    """

    failure_threshold: int = PROVIDER_FAILURE_THRESHOLD
    timeout_seconds: int = PROVIDER_RESET_TIMEOUT_SECONDS
    success_threshold: int = 1


class CircuitBreaker:
    """Circuit breaker for one provider.

    Args:
        name: Provider name for logging
        config: Circuit breaker configuration
    """

    def __init__(self, name: str, config: Optional[CircuitBreakerConfig] = None):
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.success_count = 0
        self.last_failure_time: Optional[datetime] = None

    def allow_request(self) -> bool:
        """Whether a call to the provider may be attempted now."""
        if self.state == CircuitState.OPEN:
            if self._should_attempt_reset():
                self._transition_to_half_open()
                return True
            return False
        return True

    async def call(self, func: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
        """Await ``func`` with circuit breaker protection.

        Raises:
            ExternalServiceError: If circuit is open
            Exception: Whatever ``func`` raised (counted as a failure)
        """
        if not self.allow_request():
            raise ExternalServiceError(
                service_name=self.name,
                error_type="circuit_open",
                details={
                    "message": "Circuit breaker is OPEN. Provider unavailable.",
                    "retry_after": self._time_until_retry(),
                },
            )

        try:
            result = await func(*args, **kwargs)
        except Exception:
            self.record_failure()
            raise
        self.record_success()
        return result

    def record_success(self) -> None:
        if self.state == CircuitState.HALF_OPEN:
            self.success_count += 1
            if self.success_count >= self.config.success_threshold:
                self._transition_to_closed()
        else:
            self.failure_count = 0

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = datetime.now()

        if self.state == CircuitState.HALF_OPEN:
            self._transition_to_open("re-OPENED after failure in HALF_OPEN")
        elif (
            self.state == CircuitState.CLOSED
            and self.failure_count >= self.config.failure_threshold
        ):
            self._transition_to_open(f"OPENED after {self.failure_count} failures")

    def _should_attempt_reset(self) -> bool:
        if self.last_failure_time is None:
            return False

        elapsed = datetime.now() - self.last_failure_time
        return elapsed.total_seconds() >= self.config.timeout_seconds

    def _time_until_retry(self) -> int:
        if self.last_failure_time is None:
            return 0

        elapsed = datetime.now() - self.last_failure_time
        remaining = self.config.timeout_seconds - elapsed.total_seconds()
        return max(0, int(remaining))

    def _transition_to_half_open(self) -> None:
        self.state = CircuitState.HALF_OPEN
        self.success_count = 0
        logger.info(f"Circuit breaker '{self.name}' entering HALF_OPEN state")

    def _transition_to_closed(self) -> None:
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.success_count = 0
        logger.info(f"Circuit breaker '{self.name}' CLOSED")

    def _transition_to_open(self, reason: str) -> None:
        self.state = CircuitState.OPEN
        logger.warning(
            f"Circuit breaker '{self.name}' {reason}",
            extra={"provider": self.name, "circuit_state": self.state.value},
        )

    def reset(self) -> None:
        """Manually reset circuit breaker to CLOSED state."""
        self._transition_to_closed()

    def get_state(self) -> dict[str, Any]:
        """Current breaker state for monitoring."""
        return {
            "name": self.name,
            "state": self.state.value,
            "failure_count": self.failure_count,
            "time_until_retry": self._time_until_retry()
            if self.state == CircuitState.OPEN
            else 0,
        }


class ProviderBreakers:
    """One lazily created breaker per provider name."""

    def __init__(self, config: Optional[CircuitBreakerConfig] = None) -> None:
        self._config = config or CircuitBreakerConfig()
        self._breakers: dict[str, CircuitBreaker] = {}

    def get(self, name: str) -> CircuitBreaker:
        breaker = self._breakers.get(name)
        if breaker is None:
            breaker = CircuitBreaker(name, self._config)
            self._breakers[name] = breaker
        return breaker

    def snapshot(self) -> list[dict[str, Any]]:
        return [b.get_state() for b in self._breakers.values()]

    def reset_all(self) -> None:
        for breaker in self._breakers.values():
            breaker.reset()
