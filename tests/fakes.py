"""Deterministic test doubles shared by unit and integration tests."""

from __future__ import annotations

from typing import Callable


class FakeProvider:
    """Deterministic in-process translation provider recording every call."""

    def __init__(self) -> None:
        """Initialize call logs and default behavior."""

        self.translate_calls: list[dict[str, object]] = []
        self.detect_calls: list[str] = []
        self.failures: list[Exception] = []
        self.detected_language = "de"
        self.result_count_delta = 0
        self.translator: Callable[[str, str], str] = lambda text, target: f"{target}:{text}"

    def translate_texts(
        self,
        texts: list[str],
        *,
        source_language: str,
        target_language: str,
        mime_type: str = "text/plain",
    ) -> list[str]:
        """Record the request, raise queued failures, then translate each text."""

        self.translate_calls.append(
            {
                "texts": list(texts),
                "source_language": source_language,
                "target_language": target_language,
                "mime_type": mime_type,
            }
        )
        if self.failures:
            raise self.failures.pop(0)
        results = [self.translator(text, target_language) for text in texts]
        if self.result_count_delta < 0:
            return results[: len(results) + self.result_count_delta]
        return results + ["extra"] * self.result_count_delta

    def detect_language(self, text: str) -> str:
        """Record the request and return the configured language tag."""

        self.detect_calls.append(text)
        if self.failures:
            raise self.failures.pop(0)
        return self.detected_language


class FakeClock:
    """Mutable monotonic clock with an async sleeper that advances it."""

    def __init__(self, start: float = 0.0) -> None:
        """Initialize fake time and the recorded sleep durations."""

        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        """Return the current fake time."""

        return self.now

    def advance(self, seconds: float) -> None:
        """Move fake time forward."""

        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        """Record the wait and advance fake time instead of sleeping."""

        self.sleeps.append(seconds)
        self.now += seconds
