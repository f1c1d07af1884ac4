"""Token-bucket admission control for outbound provider calls.

Responsibilities:
- Refill tokens continuously from elapsed time, capped at bucket capacity.
- Apply one configured policy when the bucket is empty: wait (`block`),
  fail fast (`strict`), or bypass limiting entirely (`test`).
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from time import monotonic
from typing import Awaitable, Callable

from ..errors import RateLimitExceeded
from ..telemetry.logger import TranslationEventLogger


@dataclass(slots=True)
class TokenBucketRateLimiter:
    """Token bucket shared by every in-flight call of one translation client.

    All callers run on one event loop, so each resumption re-reads the bucket
    state synchronously before yielding again and no lock is needed.
    """

    capacity: float = 10.0
    refill_interval_seconds: float = 1.0
    mode: str = "block"
    clock: Callable[[], float] = monotonic
    sleeper: Callable[[float], Awaitable[None]] = asyncio.sleep
    event_logger: TranslationEventLogger | None = None
    tokens: float = field(init=False)
    last_refill: float = field(init=False)
    wait_count: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        self.tokens = self.capacity
        self.last_refill = self.clock()

    def _refill(self) -> None:
        """Add `elapsed / interval` tokens, capped at capacity."""

        now = self.clock()
        elapsed = max(0.0, now - self.last_refill)
        self.tokens = min(self.capacity, self.tokens + elapsed / self.refill_interval_seconds)
        self.last_refill = now

    async def acquire(self) -> None:
        """Debit exactly one token, waiting or failing per the configured mode.

        Raises:
            RateLimitExceeded: In `strict` mode when no token is available.
        """

        if self.mode == "test":
            return
        while True:
            self._refill()
            if self.tokens >= 1.0:
                self.tokens -= 1.0
                return
            if self.mode == "strict":
                raise RateLimitExceeded(
                    "Rate limit exceeded: no request tokens available "
                    f"(capacity {self.capacity:g} per {self.refill_interval_seconds:g}s refill)."
                )
            wait_seconds = (1.0 - self.tokens) * self.refill_interval_seconds
            self.wait_count += 1
            if self.event_logger is not None:
                self.event_logger.rate_limit_wait(wait_seconds)
            await self.sleeper(wait_seconds)

    def available_tokens(self) -> float:
        """Return the refilled token count without consuming one."""

        self._refill()
        return self.tokens
