"""Shared pytest fixtures for the full livetranslate test suite."""

from __future__ import annotations

from typing import Callable

import pytest

from livetranslate.config import TranslationConfig
from livetranslate.translation.client import TranslationClient
from tests.fakes import FakeClock, FakeProvider


@pytest.fixture
def fake_provider() -> FakeProvider:
    """Provide a fresh fake provider per test."""

    return FakeProvider()


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a fake monotonic clock starting at zero."""

    return FakeClock()


@pytest.fixture
def client_config() -> TranslationConfig:
    """Provide a config that bypasses rate limiting, backoff and worker threads."""

    return TranslationConfig(
        source_language="en",
        target_language="es",
        rate_limit_mode="test",
        backoff_base_seconds=0.0,
        dispatch_mode="inline",
    )


@pytest.fixture
def make_client(
    client_config: TranslationConfig, fake_provider: FakeProvider
) -> Callable[..., TranslationClient]:
    """Provide a factory building clients around the shared fake provider."""

    def _make_client(**overrides: object) -> TranslationClient:
        """Build a client, letting tests inject collaborators by keyword."""

        overrides.setdefault("provider", fake_provider)
        return TranslationClient(client_config, **overrides)

    return _make_client
