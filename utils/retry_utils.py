"""
Retry utilities with exponential backoff for API calls
"""

import asyncio
import random
from typing import Awaitable, Callable, Any, Optional
from datetime import datetime
from enum import Enum
import openai
from utils.logging_config import get_logger

logger = get_logger(__name__)

# Define which errors should trigger retries (transient errors)
RETRIABLE_ERRORS = (
    openai.RateLimitError,
    openai.APIConnectionError,
    openai.APITimeoutError,
    openai.InternalServerError,  # Server-side issues
)

# Define which errors should NOT be retried (permanent errors)
NON_RETRIABLE_ERRORS = (
    openai.AuthenticationError,  # API key issues
    openai.BadRequestError,      # User input issues
    openai.PermissionDeniedError,
)


def exponential_backoff_delay(attempt: int, base_delay: float = 1.0, max_delay: float = 60.0) -> float:
    """
    Calculate exponential backoff delay with jitter

    Args:
        attempt: Current attempt number (0-indexed)
        base_delay: Base delay in seconds
        max_delay: Maximum delay in seconds

    Returns:
        Delay in seconds
    """
    delay = min(base_delay * (2 ** attempt), max_delay)

    # Add jitter to avoid thundering herd effect
    jitter = random.uniform(0, 0.1 * delay)

    return delay + jitter


async def retry_with_backoff(
    func: Callable[[], Awaitable[Any]],
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    on_retry: Optional[Callable[[int, Exception], None]] = None
) -> Any:
    """
    Await a coroutine factory with retry logic and exponential backoff

    Args:
        func: Zero-argument callable returning an awaitable
        max_retries: Maximum number of retry attempts
        base_delay: Base delay between retries in seconds
        max_delay: Maximum delay between retries in seconds
        on_retry: Optional callback for retry events (attempt_number, exception)

    Returns:
        Result of the awaitable if successful

    Raises:
        The last exception if all retries are exhausted
    """
    for attempt in range(max_retries + 1):  # +1 for initial attempt
        try:
            result = await func()

            if attempt > 0:
                logger.info(f"Call succeeded after {attempt} retries")

            return result

        except RETRIABLE_ERRORS as e:
            if attempt == max_retries:
                logger.error(f"Call failed after {max_retries} retries: {str(e)}")
                raise

            delay = exponential_backoff_delay(attempt, base_delay, max_delay)

            logger.warning(f"Attempt {attempt + 1} failed ({e.__class__.__name__}), retrying in {delay:.2f}s")

            if on_retry:
                on_retry(attempt + 1, e)

            await asyncio.sleep(delay)

        except NON_RETRIABLE_ERRORS as e:
            logger.warning(f"Non-retriable error encountered: {e.__class__.__name__}: {str(e)}")
            raise


class CircuitState(Enum):
    """Circuit breaker states"""
    CLOSED = "closed"      # Normal operation, requests pass through
    OPEN = "open"          # Circuit is open, requests are blocked
    HALF_OPEN = "half_open"  # Testing if service has recovered


class CircuitBreakerError(Exception):
    """Raised when a call is blocked by an open circuit"""
    pass


class CircuitBreaker:
    """
    Circuit breaker for external API calls

    States:
    - CLOSED: Normal operation, all requests pass through
    - OPEN: Circuit is open, requests fail fast without hitting the API
    - HALF_OPEN: Testing recovery, limited requests allowed through

    Runs on a single event loop, so state changes need no lock.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: int = 60,
        expected_exception: tuple = RETRIABLE_ERRORS,
        name: str = "CircuitBreaker"
    ):
        """
        Initialize circuit breaker

        Args:
            failure_threshold: Number of failures before opening circuit
            recovery_timeout: Seconds to wait before attempting recovery
            expected_exception: Exceptions that count as failures
            name: Name for logging and identification
        """
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception = expected_exception
        self.name = name

        self.failure_count = 0
        self.success_count = 0
        self.last_failure_time: Optional[datetime] = None
        self.state = CircuitState.CLOSED

        logger.debug(f"CircuitBreaker '{name}' initialized with threshold={failure_threshold}, timeout={recovery_timeout}s")

    def _should_attempt_reset(self) -> bool:
        """Check if enough time has passed to attempt recovery"""
        if self.last_failure_time is None:
            return False

        time_since_failure = datetime.now() - self.last_failure_time
        return time_since_failure.total_seconds() >= self.recovery_timeout

    def _record_success(self):
        self.failure_count = 0
        self.success_count += 1

        if self.state == CircuitState.HALF_OPEN:
            self.state = CircuitState.CLOSED
            logger.info(f"CircuitBreaker '{self.name}' recovered - state: CLOSED")

    def _record_failure(self, exception: Exception):
        self.failure_count += 1
        self.last_failure_time = datetime.now()

        if self.state == CircuitState.HALF_OPEN:
            self.state = CircuitState.OPEN
            logger.warning(f"CircuitBreaker '{self.name}' recovery failed - state: OPEN")

        elif self.state == CircuitState.CLOSED and self.failure_count >= self.failure_threshold:
            self.state = CircuitState.OPEN
            logger.warning(f"CircuitBreaker '{self.name}' opened - failures: {self.failure_count}")

    def can_execute(self) -> bool:
        """Check if a request can be executed"""
        if self.state == CircuitState.CLOSED:
            return True

        if self.state == CircuitState.OPEN:
            if self._should_attempt_reset():
                self.state = CircuitState.HALF_OPEN
                logger.info(f"CircuitBreaker '{self.name}' attempting recovery - state: HALF_OPEN")
                return True
            return False

        # HALF_OPEN lets the probe request through
        return True

    async def execute(self, func: Callable[[], Awaitable[Any]]) -> Any:
        """
        Await a coroutine factory with circuit breaker protection

        Raises:
            CircuitBreakerError: If circuit is open
            Original exception: If the call fails
        """
        if not self.can_execute():
            remaining_time = self.recovery_timeout
            if self.last_failure_time:
                elapsed = (datetime.now() - self.last_failure_time).total_seconds()
                remaining_time = max(0, self.recovery_timeout - elapsed)

            raise CircuitBreakerError(
                f"Circuit breaker '{self.name}' is OPEN. "
                f"Service appears to be down. Retry in {remaining_time:.0f}s."
            )

        try:
            result = await func()
        except self.expected_exception as e:
            self._record_failure(e)
            raise

        self._record_success()
        return result

    def get_state(self) -> dict:
        """Get current circuit breaker state for monitoring"""
        remaining_timeout = 0
        if self.last_failure_time and self.state == CircuitState.OPEN:
            elapsed = (datetime.now() - self.last_failure_time).total_seconds()
            remaining_timeout = max(0, self.recovery_timeout - elapsed)

        return {
            "name": self.name,
            "state": self.state.value,
            "failure_count": self.failure_count,
            "success_count": self.success_count,
            "failure_threshold": self.failure_threshold,
            "remaining_timeout": remaining_timeout,
            "last_failure_time": self.last_failure_time.isoformat() if self.last_failure_time else None
        }

    def reset(self):
        """Manually reset the circuit breaker to CLOSED state"""
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.last_failure_time = None
        logger.info(f"CircuitBreaker '{self.name}' manually reset - state: CLOSED")


async def retry_with_circuit_breaker(
    func: Callable[[], Awaitable[Any]],
    circuit_breaker: CircuitBreaker,
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    on_retry: Optional[Callable[[int, Exception], None]] = None
) -> Any:
    """
    Await a coroutine factory with both retry logic and circuit breaker protection

    Raises:
        CircuitBreakerError: If circuit breaker is open
        The last exception if all retries are exhausted
    """
    async def wrapped_func():
        return await circuit_breaker.execute(func)

    return await retry_with_backoff(
        wrapped_func,
        max_retries=max_retries,
        base_delay=base_delay,
        max_delay=max_delay,
        on_retry=on_retry
    )
