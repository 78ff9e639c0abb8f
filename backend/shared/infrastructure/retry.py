"""
Retry utilities for units of work against the database.

Transient failures (ticket number collisions, lock timeouts, serialization
failures) are retried with exponential backoff and jitter. Deterministic
failures are never retried: the predicate decides.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import Callable, Final, TypeVar

from shared.config.logging import get_logger
from shared.config.settings import settings

logger = get_logger(__name__)

T = TypeVar("T")


# Default jitter range: ±25% of calculated delay
DEFAULT_JITTER_FACTOR: Final[float] = 0.25

# Default exponential backoff base
DEFAULT_BACKOFF_BASE: Final[float] = 2.0


@dataclass(frozen=True, slots=True)
class RetryConfig:
    """
    Configuration for retry behavior.

    Attributes:
        max_attempts: Total attempts including the first one.
        initial_delay: Base delay in seconds.
        max_delay: Maximum delay cap in seconds.
        backoff_base: Exponential backoff multiplier.
        jitter_factor: Random jitter range as fraction (0.25 = ±25%).
    """

    max_attempts: int = 3
    initial_delay: float = 0.05
    max_delay: float = 0.5
    backoff_base: float = DEFAULT_BACKOFF_BASE
    jitter_factor: float = DEFAULT_JITTER_FACTOR

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.initial_delay < 0:
            raise ValueError("initial_delay must be >= 0")
        if self.max_delay < self.initial_delay:
            raise ValueError("max_delay must be >= initial_delay")
        if self.backoff_base < 1:
            raise ValueError("backoff_base must be >= 1")
        if not 0 <= self.jitter_factor <= 1:
            raise ValueError("jitter_factor must be between 0 and 1")

    @classmethod
    def from_settings(cls, max_attempts: int) -> "RetryConfig":
        return cls(
            max_attempts=max_attempts,
            initial_delay=settings.retry_initial_delay,
            max_delay=settings.retry_max_delay,
        )


def calculate_delay_with_jitter(attempt: int, config: RetryConfig) -> float:
    """
    Calculate retry delay with exponential backoff and jitter.

    The delay is calculated as:
        base_delay = initial_delay * (backoff_base ^ attempt)
        capped_delay = min(base_delay, max_delay)
        final_delay = capped_delay * (1 ± jitter_factor)

    Args:
        attempt: Current attempt number (0-indexed).
        config: Retry configuration.

    Returns:
        Delay in seconds with jitter applied.
    """
    base_delay = config.initial_delay * (config.backoff_base ** attempt)
    capped_delay = min(base_delay, config.max_delay)

    jitter_range = capped_delay * config.jitter_factor
    jitter = random.uniform(-jitter_range, jitter_range)

    return max(0.0, capped_delay + jitter)


def run_with_retry(
    operation: Callable[[], T],
    *,
    config: RetryConfig,
    is_retryable: Callable[[BaseException], bool],
    label: str,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run ``operation`` until it succeeds, fails with a non-retryable error, or
    ``config.max_attempts`` is reached.

    The operation must leave the session clean (rolled back) before raising.
    On exhaustion the last retryable exception is re-raised for the caller to
    translate.
    """
    for attempt in range(config.max_attempts):
        try:
            return operation()
        except Exception as exc:
            if not is_retryable(exc):
                raise
            remaining = config.max_attempts - attempt - 1
            if remaining == 0:
                logger.warning(
                    "Retries exhausted",
                    operation=label,
                    attempts=config.max_attempts,
                    error=type(exc).__name__,
                )
                raise
            delay = calculate_delay_with_jitter(attempt, config)
            logger.info(
                "Retrying after transient failure",
                operation=label,
                attempt=attempt + 1,
                remaining=remaining,
                delay_s=round(delay, 3),
                error=type(exc).__name__,
            )
            sleep(delay)

    # max_attempts >= 1 guarantees the loop returns or raises
    raise AssertionError("unreachable")
