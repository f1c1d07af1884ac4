"""Integration-test fixtures for deterministic provider behavior."""

from __future__ import annotations

import os
from typing import Iterator

import pytest

from livetranslate.telemetry.logger import configure_logging
from livetranslate.translation.provider import HttpTranslationProvider


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Drop `LIVETRANSLATE_*` variables so host settings never leak into tests."""

    for key in list(os.environ):
        if key.startswith("LIVETRANSLATE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("LIVETRANSLATE_BACKOFF_BASE_SECONDS", "0")
    yield
    # CLI commands bind loguru to the runner stream; rebind to the real stderr.
    configure_logging(level="WARNING")


@pytest.fixture(autouse=True)
def _mock_provider_calls(monkeypatch: pytest.MonkeyPatch) -> None:
    """Mock HTTP provider calls in integration tests to avoid network/key requirements."""

    def _mock_translate_texts(self, texts: list[str], **kwargs: object) -> list[str]:
        """Prefix each text with the requested target language."""

        _ = self
        target_language = kwargs["target_language"]
        return [f"[{target_language}] {text}" for text in texts]

    def _mock_detect_language(self, text: str) -> str:
        """Return a fixed language tag."""

        _ = self
        _ = text
        return "DE"

    monkeypatch.setattr(HttpTranslationProvider, "translate_texts", _mock_translate_texts)
    monkeypatch.setattr(HttpTranslationProvider, "detect_language", _mock_detect_language)
