"""Counters for cache, provider and retry activity.

Responsibilities:
- Track per-client translation counters.
- Provide a flat summary for CLI reporting.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TranslationStats:
    """Collect and summarize translation client counters."""

    cache_hits: int = 0
    cache_misses: int = 0
    remote_calls: int = 0
    retry_attempts: int = 0
    rate_limit_waits: int = 0
    padded_results: int = 0

    def hit_rate(self) -> float:
        """Return cache hit rate for the client lifecycle."""

        total = self.cache_hits + self.cache_misses
        if total == 0:
            return 0.0
        return self.cache_hits / float(total)

    def summary(self) -> dict[str, str]:
        """Return a string-valued summary dictionary for reporting."""

        return {
            "cache_hits": str(self.cache_hits),
            "cache_misses": str(self.cache_misses),
            "cache_hit_rate": f"{self.hit_rate():.4f}",
            "remote_calls": str(self.remote_calls),
            "retry_attempts": str(self.retry_attempts),
            "rate_limit_waits": str(self.rate_limit_waits),
            "padded_results": str(self.padded_results),
        }
