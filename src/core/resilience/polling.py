"""
Poll-until-ready utilities with exception-aware handling.

Used where the management plane converges asynchronously (Geo-DR pairing
provisioning, metadata replication to the secondary namespace):
- Check returns None/False: not ready yet, back off and check again
- Transient errors (throttling, 5xx, connection drops): not ready, back off
- Any other exception (auth, permanent, unclassified): raised immediately
- Deadline reached: PropagationTimeoutError
"""

import asyncio
import logging
import random
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from core.errors.exceptions import (
    ManagementError,
    PropagationTimeoutError,
    ThrottlingError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class PollConfig:
    """Configuration for polling behavior."""

    timeout_seconds: float = 300.0
    base_delay: float = 5.0
    max_delay: float = 30.0
    exponential_base: float = 2.0

    # If True, use retry_after from ThrottlingError when available
    respect_retry_after: bool = True

    def __post_init__(self):
        """Ensure proper types from YAML/env vars."""
        self.timeout_seconds = float(self.timeout_seconds)
        self.base_delay = float(self.base_delay)
        self.max_delay = float(self.max_delay)
        self.exponential_base = float(self.exponential_base)
        self.respect_retry_after = (
            self.respect_retry_after
            if isinstance(self.respect_retry_after, bool)
            else str(self.respect_retry_after).lower() in ("true", "1", "yes")
        )
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        if self.base_delay <= 0 or self.max_delay <= 0:
            raise ValueError("poll delays must be positive")

    def get_delay(self, attempt: int, error: Exception | None = None) -> float:
        """
        Calculate delay with equal jitter.

        Args:
            attempt: 0-indexed attempt number
            error: Optional exception to check for retry_after

        Returns:
            Delay in seconds
        """
        if (
            self.respect_retry_after
            and isinstance(error, ThrottlingError)
            and error.retry_after
        ):
            return min(error.retry_after, self.max_delay)

        base_delay = self.base_delay * (self.exponential_base**attempt)

        # Equal jitter: half fixed, half random
        jitter = random.uniform(0, base_delay / 2)
        delay = (base_delay / 2) + jitter

        return min(delay, self.max_delay)


DEFAULT_POLL = PollConfig()


async def wait_until(
    check: Callable[[], Awaitable[T | None]],
    *,
    description: str,
    config: PollConfig | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> T:
    """
    Call ``check`` until it returns a result or the deadline passes.

    Args:
        check: Coroutine function returning the ready value, or None/False
            when the resource has not converged yet
        description: What is being waited for (used in logs and errors)
        config: Poll configuration (defaults to DEFAULT_POLL)
        sleep: Sleep coroutine (injectable for tests)
        clock: Monotonic clock (injectable for tests)

    Returns:
        The first non-empty value returned by ``check``

    Raises:
        PropagationTimeoutError: If the deadline passes before ``check`` succeeds
        Exception: Anything ``check`` raises other than a transient ManagementError
    """
    if config is None:
        config = DEFAULT_POLL

    started = clock()
    deadline = started + config.timeout_seconds
    attempt = 0
    last_error: ManagementError | None = None

    while True:
        try:
            result = await check()
        except ManagementError as e:
            if not e.is_retryable:
                logger.warning(
                    "Non-retryable error while waiting for %s, giving up: %s",
                    description,
                    str(e)[:200],
                    extra={
                        "operation": description,
                        "attempt": attempt + 1,
                        "error_category": e.category.value,
                        "error_message": str(e)[:200],
                    },
                )
                raise
            last_error = e
            result = None
        else:
            last_error = None

        if result is not None and result is not False:
            if attempt > 0:
                logger.info(
                    "Finished waiting for %s after %d checks",
                    description,
                    attempt + 1,
                    extra={
                        "operation": description,
                        "attempt": attempt + 1,
                        "duration_ms": round((clock() - started) * 1000, 2),
                    },
                )
            return result

        now = clock()
        if now >= deadline:
            logger.error(
                "Gave up waiting for %s after %.0fs",
                description,
                config.timeout_seconds,
                extra={
                    "operation": description,
                    "attempt": attempt + 1,
                    "error_message": str(last_error)[:200] if last_error else None,
                },
            )
            raise PropagationTimeoutError(
                description, config.timeout_seconds, attempt + 1, cause=last_error
            )

        delay = min(config.get_delay(attempt, last_error), deadline - now)
        logger.debug(
            "Still waiting for %s",
            description,
            extra={
                "operation": description,
                "attempt": attempt + 1,
                "delay_seconds": round(delay, 2),
                "delay_source": "server"
                if isinstance(last_error, ThrottlingError) and last_error.retry_after
                else "exponential_backoff",
            },
        )
        await sleep(delay)
        attempt += 1


__all__ = [
    "DEFAULT_POLL",
    "PollConfig",
    "wait_until",
]
