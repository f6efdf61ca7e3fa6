"""Retry with exponential backoff for async operations."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from weathercards.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """
    Immutable retry configuration.

    Attributes:
        max_attempts: Total attempts including the first one (>= 1)
        base_delay: Delay before the first retry, in seconds
        max_delay: Upper bound for any single delay, in seconds
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 5.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("Retry delays must be non-negative")

    def delay_for(self, attempt: int) -> float:
        """Delay to wait after failed attempt number `attempt` (1-based)."""
        return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        """Build the API retry policy from application settings."""
        return cls(
            max_attempts=settings.retry_max_attempts,
            base_delay=settings.retry_base_delay,
            max_delay=settings.retry_max_delay,
        )


DEFAULT_POLICY = RetryPolicy()


class RetryExecutor:
    """
    Runs an async operation with bounded retries and exponential backoff.

    The last failure is re-raised unchanged once attempts are exhausted.
    """

    def __init__(
        self,
        default_policy: RetryPolicy | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """
        Initialize the executor.

        Args:
            default_policy: Policy used when run() gets none
            sleep: Awaitable sleep function taking seconds
        """
        self._default_policy = default_policy or DEFAULT_POLICY
        self._sleep = sleep

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        policy: RetryPolicy | None = None,
        label: str = "Operation",
    ) -> T:
        """
        Invoke operation until it succeeds or attempts run out.

        Args:
            operation: Zero-argument coroutine function
            policy: Retry policy for this call
            label: Name used in log messages

        Returns:
            The operation's result

        Raises:
            Exception: The last exception raised by operation
        """
        policy = policy or self._default_policy
        last_error: Exception | None = None

        for attempt in range(1, policy.max_attempts + 1):
            try:
                if attempt > 1:
                    logger.info(f"{label} - retry attempt {attempt}")

                result = await operation()

                if attempt > 1:
                    logger.info(f"{label} succeeded on attempt {attempt}")
                return result

            except Exception as e:
                last_error = e
                logger.warning(f"{label} failed on attempt {attempt}: {e}")

                if attempt < policy.max_attempts:
                    delay = policy.delay_for(attempt)
                    logger.info(f"Waiting {delay:.2f}s before retry...")
                    await self._sleep(delay)

        logger.error(f"{label} failed after {policy.max_attempts} attempts")
        if last_error:
            raise last_error
        raise RuntimeError("Unexpected retry loop exit")

    async def run_api_call(
        self,
        api_call: Callable[[], Awaitable[T]],
        policy: RetryPolicy | None = None,
        api_name: str = "API Call",
    ) -> T:
        """Run an API call with the API retry defaults."""
        return await self.run(api_call, policy or RetryPolicy.from_settings(), api_name)
