"""Bounded fixed-interval retry shared by the device and cloud flows.

A policy is either count-bounded or duration-bounded, chosen explicitly
through :meth:`RetryPolicy.attempts` or :meth:`RetryPolicy.duration`. Between
failed attempts the policy sleeps a fixed ``sleep_between`` seconds; there is
no jitter and no exponential growth.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_SLEEP_BETWEEN_SECONDS = 1.0


class RetryMode(str, Enum):
    ATTEMPTS = "attempts"
    DURATION = "duration"


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    mode: RetryMode
    limit: float
    sleep_between: float = DEFAULT_SLEEP_BETWEEN_SECONDS
    retry_on: Tuple[Type[BaseException], ...] = (Exception,)

    def __post_init__(self) -> None:
        if self.limit <= 0:
            raise ValueError(f"Retry limit must be positive, got {self.limit}")
        if self.sleep_between < 0:
            raise ValueError(f"sleep_between must be >= 0, got {self.sleep_between}")

    @classmethod
    def attempts(
        cls,
        max_attempts: int,
        sleep_between: float = DEFAULT_SLEEP_BETWEEN_SECONDS,
        *,
        retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    ) -> "RetryPolicy":
        """Retry until ``max_attempts`` invocations have been made."""

        return cls(RetryMode.ATTEMPTS, max_attempts, sleep_between, retry_on)

    @classmethod
    def duration(
        cls,
        max_elapsed: float,
        sleep_between: float = DEFAULT_SLEEP_BETWEEN_SECONDS,
        *,
        retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    ) -> "RetryPolicy":
        """Retry until ``max_elapsed`` seconds have passed since the first call."""

        return cls(RetryMode.DURATION, max_elapsed, sleep_between, retry_on)

    def should_continue(self, attempts_made: int, elapsed: float) -> bool:
        if self.mode == RetryMode.ATTEMPTS:
            return attempts_made < self.limit
        return elapsed < self.limit


async def retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    description: Optional[str] = None,
) -> T:
    """Await ``operation`` until it succeeds or ``policy`` is exhausted.

    The final exception is re-raised unchanged once the policy gives up.
    Exceptions outside ``policy.retry_on`` propagate immediately.
    """

    label = description or getattr(operation, "__name__", "operation")
    started = time.monotonic()
    attempts_made = 0

    while True:
        attempts_made += 1
        try:
            return await operation()
        except policy.retry_on as exc:
            elapsed = time.monotonic() - started
            if not policy.should_continue(attempts_made, elapsed):
                LOGGER.warning(
                    "%s failed after %d attempt(s) in %.1fs: %s",
                    label,
                    attempts_made,
                    elapsed,
                    exc,
                )
                raise

            LOGGER.warning(
                "%s attempt %d failed: %s, retrying in %.1fs",
                label,
                attempts_made,
                exc,
                policy.sleep_between,
            )
            await asyncio.sleep(policy.sleep_between)
