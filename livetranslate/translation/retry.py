"""Bounded exponential-backoff retries for async provider operations.

Responsibilities:
- Re-run transient (`NetworkError`) failures up to an attempt budget.
- Propagate the last error unchanged once the budget is exhausted.
- Honor an optional cancellation signal between attempts.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

from ..errors import NetworkError, TranslationCancelled
from ..telemetry.logger import TranslationEventLogger

_Result = TypeVar("_Result")


def is_retryable(exc: BaseException) -> bool:
    """Return whether an error is transient and worth another attempt."""

    return isinstance(exc, NetworkError)


class RetryExecutor:
    """Run async operations with `base * 2**attempt_index` backoff and no jitter.

    The executor does not deduplicate side effects; retried operations must be
    idempotent themselves.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay_seconds: float = 1.0,
        sleeper: Callable[[float], Awaitable[None]] = asyncio.sleep,
        retryable: Callable[[BaseException], bool] = is_retryable,
        event_logger: TranslationEventLogger | None = None,
    ) -> None:
        """Initialize attempt budget, backoff base and injectable sleeper."""

        if max_attempts < 1:
            raise ValueError("`max_attempts` must be a positive integer.")
        self.max_attempts = max_attempts
        self.base_delay_seconds = base_delay_seconds
        self.sleeper = sleeper
        self.retryable = retryable
        self.event_logger = event_logger
        self.retry_attempt_count = 0

    async def run_with_backoff(
        self,
        operation: Callable[[], Awaitable[_Result]],
        *,
        operation_name: str = "operation",
        cancel_event: asyncio.Event | None = None,
    ) -> _Result:
        """Execute `operation`, retrying retryable failures with backoff.

        Args:
            operation: Zero-argument coroutine factory; called once per attempt.
            operation_name: Label used in retry log events.
            cancel_event: Optional signal checked before every attempt and
                after every backoff sleep.

        Raises:
            TranslationCancelled: If `cancel_event` is set before completion.
        """

        for attempt_index in range(self.max_attempts):
            self._check_cancelled(cancel_event, operation_name)
            try:
                return await operation()
            except Exception as exc:
                is_last_attempt = attempt_index == self.max_attempts - 1
                if is_last_attempt or not self.retryable(exc):
                    raise
                delay_seconds = self.base_delay_seconds * (2**attempt_index)
                self.retry_attempt_count += 1
                if self.event_logger is not None:
                    self.event_logger.retry_scheduled(
                        operation_name, attempt_index + 1, delay_seconds, type(exc).__name__
                    )
                if delay_seconds > 0:
                    await self.sleeper(delay_seconds)
        raise AssertionError("unreachable: retry loop always returns or raises")

    @staticmethod
    def _check_cancelled(cancel_event: asyncio.Event | None, operation_name: str) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise TranslationCancelled(f"`{operation_name}` was cancelled before completion.")


async def run_with_backoff(
    operation: Callable[[], Awaitable[_Result]],
    max_attempts: int = 3,
    base_delay_seconds: float = 1.0,
) -> _Result:
    """Run `operation` under a one-off `RetryExecutor` policy."""

    executor = RetryExecutor(max_attempts=max_attempts, base_delay_seconds=base_delay_seconds)
    return await executor.run_with_backoff(operation)
