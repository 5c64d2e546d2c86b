"""
Shared resilience for command interpretation providers.

A provider call is wrapped in a tenacity retry loop and a circuit breaker.
Providers raise the builtin TimeoutError and ConnectionError for transient
trouble (network faults, 429 and 5xx replies); anything else passes
through untouched and is neither retried nor counted against the breaker.
"""

import enum
import time
from abc import ABC
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from intellectory.config import get_logger, get_settings
from intellectory.core.exceptions import (
    CircuitBreakerOpenError,
    LLMTimeoutError,
    LLMUnavailableError,
)
from intellectory.core.interfaces import ILLMProvider

logger = get_logger(__name__)

T = TypeVar("T")

TRANSIENT_ERRORS = (TimeoutError, ConnectionError)


class BreakerState(str, enum.Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """
    Opens after `failure_threshold` consecutive failed calls.

    While open every call is refused until `cooldown_seconds` have passed;
    the next call is then let through as a trial. A successful trial closes
    the breaker, a failed one reopens it for another cooldown.
    """

    def __init__(
        self,
        provider: str,
        failure_threshold: int = 3,
        cooldown_seconds: int = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.provider = provider
        self.failure_threshold = failure_threshold
        self.cooldown_seconds = cooldown_seconds
        self.state = BreakerState.CLOSED
        self.consecutive_failures = 0
        self._opened_at = 0.0
        self._clock = clock

    @property
    def is_open(self) -> bool:
        return self.state is BreakerState.OPEN

    @property
    def cooldown_remaining(self) -> int:
        if self.state is not BreakerState.OPEN:
            return 0
        return max(0, int(self.cooldown_seconds - (self._clock() - self._opened_at)))

    def before_call(self) -> None:
        if self.state is not BreakerState.OPEN:
            return
        remaining = self.cooldown_remaining
        if remaining > 0:
            raise CircuitBreakerOpenError(self.provider, remaining)
        self.state = BreakerState.HALF_OPEN
        logger.info("circuit_breaker_probing", provider=self.provider)

    def on_success(self) -> None:
        if self.state is not BreakerState.CLOSED:
            logger.info("circuit_breaker_closed", provider=self.provider)
        self.state = BreakerState.CLOSED
        self.consecutive_failures = 0

    def on_failure(self) -> None:
        self.consecutive_failures += 1
        probing = self.state is BreakerState.HALF_OPEN
        if probing or self.consecutive_failures >= self.failure_threshold:
            self.state = BreakerState.OPEN
            self._opened_at = self._clock()
            logger.warning(
                "circuit_breaker_opened",
                provider=self.provider,
                failures=self.consecutive_failures,
                cooldown=self.cooldown_seconds,
            )


def _log_attempt_failed(state: RetryCallState) -> None:
    error = state.outcome.exception() if state.outcome else None
    logger.warning("llm_attempt_failed", attempt=state.attempt_number, error=str(error))


class BaseLLMProvider(ILLMProvider, ABC):
    """Providers subclass this and route every remote call through `_with_resilience`."""

    provider_name = "llm"

    def __init__(self) -> None:
        llm = get_settings().llm
        self.circuit_breaker = CircuitBreaker(
            self.provider_name,
            failure_threshold=llm.failure_threshold,
            cooldown_seconds=llm.cooldown_seconds,
        )

    def _retrying(self) -> AsyncRetrying:
        llm = get_settings().llm
        return AsyncRetrying(
            stop=stop_after_attempt(max(1, llm.max_retries)),
            wait=wait_exponential(
                multiplier=llm.retry_delay,
                min=llm.retry_delay,
                max=llm.retry_delay * llm.retry_multiplier**3,
            ),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            before_sleep=_log_attempt_failed,
            reraise=True,
        )

    async def _with_resilience(
        self,
        operation: Callable[..., Awaitable[T]],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """
        Run `operation` under the breaker, retrying transient errors.

        Raises:
            CircuitBreakerOpenError: while the breaker is cooling down
            LLMTimeoutError: every attempt timed out
            LLMUnavailableError: the provider stayed unreachable
        """
        self.circuit_breaker.before_call()

        try:
            async for attempt in self._retrying():
                with attempt:
                    result = await operation(*args, **kwargs)
        except TimeoutError:
            self.circuit_breaker.on_failure()
            raise LLMTimeoutError(get_settings().llm.timeout)
        except ConnectionError as e:
            self.circuit_breaker.on_failure()
            raise LLMUnavailableError(self.provider_name, str(e))

        self.circuit_breaker.on_success()
        return result
