"""Structured event logging for the translation service.

Responsibilities:
- Emit concise, deterministic `key=value` event lines through `loguru`.
- Never log source or translated text; only hashed keys and counters.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


def configure_logging(sink: TextIO | None = None, level: str = "INFO") -> None:
    """Route loguru output to one plain-text sink, replacing existing handlers."""

    logger.remove()
    logger.add(sink or sys.stderr, format="{message}", level=level, colorize=False)


class TranslationEventLogger:
    """Emit deterministic component events for translation activity."""

    def _emit(self, level: str, component: str, event: str, **context: object) -> None:
        """Emit one structured runtime log line."""

        line = (
            f"[translation] level={level} component={component} "
            f"event={event}{_format_context(context)}"
        )
        logger.log(level, line)

    def cache_hit(self, cache_key: str) -> None:
        self._emit("DEBUG", "cache", "hit", key=cache_key)

    def cache_miss(self, cache_key: str) -> None:
        self._emit("DEBUG", "cache", "miss", key=cache_key)

    def cache_cleared(self) -> None:
        self._emit("INFO", "cache", "cleared")

    def rate_limit_wait(self, wait_seconds: float) -> None:
        """Emit a wait event when the token bucket is empty."""

        self._emit("INFO", "rate_limiter", "wait", seconds=f"{wait_seconds:.3f}")

    def retry_scheduled(
        self, operation: str, attempt: int, delay_seconds: float, error_type: str
    ) -> None:
        """Emit a retry event with sanitized exception metadata."""

        self._emit(
            "WARNING",
            "retry",
            "scheduled",
            operation=operation,
            attempt=attempt,
            delay=f"{delay_seconds:.3f}",
            error_type=error_type,
        )

    def remote_call(self, operation: str, item_count: int) -> None:
        self._emit("DEBUG", "provider", "call", operation=operation, items=item_count)

    def batch_misaligned(self, expected: int, received: int) -> None:
        """Emit a warning when a provider returns a mismatched batch length."""

        self._emit("WARNING", "batch", "misaligned", expected=expected, received=received)

    def failure(self, component: str, error_type: str) -> None:
        """Emit a failure event without sensitive payload details."""

        self._emit("ERROR", component, "failure", error_type=error_type)
