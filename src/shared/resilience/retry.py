"""
Retry pattern with exponential backoff and jitter.

Provides bounded retry logic for transient failures such as a broker
refusing or dropping a connection.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_attempts: int = 3
    """Maximum number of attempts (including initial attempt)"""

    initial_delay: float = 1.0
    """Initial delay between retries in seconds"""

    max_delay: float = 60.0
    """Maximum delay between retries in seconds"""


    backoff_multiplier: float = 2.0
    """Growth factor applied to the delay after each failed attempt"""

    jitter: bool = True
    """Add random jitter to prevent thundering herd"""

    jitter_factor: float = 0.1
    """Jitter factor (0.0-1.0). 0.1 means +/-10% randomness"""

    retry_on: tuple = (Exception,)
    """Exception types to retry on"""

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.initial_delay < 0 or self.max_delay < 0:
            raise ValueError("Retry delays cannot be negative")
        if not 0.0 <= self.jitter_factor <= 1.0:
            raise ValueError("jitter_factor must be between 0.0 and 1.0")


class RetryError(Exception):
    """Raised when all retry attempts are exhausted."""

    def __init__(
        self,
        message: str,
        attempts: int,
        last_exception: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.attempts = attempts
        self.last_exception = last_exception


class Retry:
    """
    Async retry handler with configurable backoff strategies.

    Example:
        retry = Retry(RetryConfig(max_attempts=5, retry_on=(ConnectError,)))
        session = await retry.execute_async(connect_once)
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.config = config or RetryConfig()
        self._sleep = sleep

    def calculate_delay(self, attempt: int) -> float:
        """
        Calculate delay after a failed attempt.

        Args:
            attempt: Failed attempt number (0-indexed)

        Returns:
            Delay in seconds
        """
        delay = self.config.initial_delay * (self.config.backoff_multiplier**attempt)

        # Cap at max_delay
        delay = min(delay, self.config.max_delay)

        if self.config.jitter:
            jitter_range = delay * self.config.jitter_factor
            delay = max(0.0, delay + random.uniform(-jitter_range, jitter_range))

        return delay

    async def execute_async(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """
        Execute async function with retry logic.

        Args:
            func: Async function to execute
            *args: Positional arguments for func
            **kwargs: Keyword arguments for func

        Returns:
            Function result

        Raises:
            RetryError: When all attempts exhausted
            Exception: Any exception not listed in ``retry_on``, unchanged
        """
        for attempt in range(self.config.max_attempts):
            try:
                result = await func(*args, **kwargs)
            except self.config.retry_on as e:
                if attempt >= self.config.max_attempts - 1:
                    raise RetryError(
                        f"All {self.config.max_attempts} attempts exhausted. "
                        f"Last error: {type(e).__name__}: {e}",
                        attempts=self.config.max_attempts,
                        last_exception=e,
                    ) from e

                delay = self.calculate_delay(attempt)
                logger.warning(
                    f"{type(e).__name__}: {e}. "
                    f"Attempt {attempt + 1}/{self.config.max_attempts}. "
                    f"Retrying in {delay:.2f}s..."
                )
                await self._sleep(delay)
                continue

            if attempt > 0:
                logger.info(
                    f"Operation succeeded on attempt "
                    f"{attempt + 1}/{self.config.max_attempts}"
                )
            return result

        # Unreachable: the loop either returns or raises
        raise RetryError("Unexpected retry exhaustion", attempts=self.config.max_attempts)


__all__ = [
    "Retry",
    "RetryConfig",
    "RetryError",
]
