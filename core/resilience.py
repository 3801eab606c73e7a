"""
KJV OSIS Importer - Retry With Backoff

Used by the network-facing fetch step only. Conversion is deterministic and
never retried.
"""

from __future__ import annotations

import functools
import random
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, ParamSpec, Set, Type, TypeVar

from opentelemetry import trace

from observability.logging import get_logger

T = TypeVar("T")
P = ParamSpec("P")

tracer = trace.get_tracer(__name__)
logger = get_logger(__name__)


@dataclass
class RetryConfig:
    """Attempt budget and backoff curve."""

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0
    jitter: bool = True
    retryable_exceptions: Set[Type[Exception]] = field(
        default_factory=lambda: {Exception}
    )
    non_retryable_exceptions: Set[Type[Exception]] = field(default_factory=set)


class RetryPolicy:
    """
    Re-run a callable on retryable exceptions, sleeping with exponential
    backoff between attempts. The last exception propagates once the
    attempt budget is spent.

    Usage:
        policy = RetryPolicy(RetryConfig(max_attempts=3))
        download = policy.wrap(download)
    """

    def __init__(self, config: Optional[RetryConfig] = None):
        self.config = config or RetryConfig()

    def calculate_delay(self, attempt: int) -> float:
        """Delay after the given zero-based attempt."""
        config = self.config
        delay = min(config.base_delay * config.exponential_base ** attempt, config.max_delay)
        if config.jitter:
            delay *= random.uniform(0.5, 1.5)
        return delay

    def is_retryable(self, exception: Exception) -> bool:
        if isinstance(exception, tuple(self.config.non_retryable_exceptions)):
            return False
        return isinstance(exception, tuple(self.config.retryable_exceptions))

    def wrap(self, func: Callable[P, T]) -> Callable[P, T]:
        max_attempts = self.config.max_attempts

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            attempt = 0
            while True:
                with tracer.start_as_current_span(f"retry.{func.__name__}") as span:
                    span.set_attribute("retry.attempt", attempt + 1)
                    span.set_attribute("retry.max_attempts", max_attempts)
                    try:
                        return func(*args, **kwargs)
                    except Exception as e:
                        error = e
                        span.set_attribute("retry.exception", type(e).__name__)
                        if not self.is_retryable(e) or attempt + 1 >= max_attempts:
                            raise
                        delay = self.calculate_delay(attempt)
                        span.set_attribute("retry.delay_seconds", delay)

                logger.warning(
                    "Retrying after failure",
                    operation=func.__name__,
                    attempt=attempt + 1,
                    max_attempts=max_attempts,
                    error=str(error),
                    delay_seconds=round(delay, 2),
                )
                time.sleep(delay)
                attempt += 1

        return wrapper
