"""Domain exceptions for translation and CLI diagnostics.

Only `NetworkError` (and its `HttpError` subclass) is considered transient and
eligible for retry; every other error propagates on first occurrence.
"""

from __future__ import annotations


class TranslationError(RuntimeError):
    """Base class for all translation service failures."""


class StorageError(TranslationError):
    """Raised when the cache backend is unavailable or an operation fails."""


class RateLimitExceeded(TranslationError):
    """Raised by the strict rate-limit policy when no token is available."""


class NetworkError(TranslationError):
    """Raised for transport-level failures talking to the remote provider."""

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str = "transport",
        status_code: int | None = None,
    ) -> None:
        """Initialize provider failure metadata for diagnostics."""

        super().__init__(message)
        self.failure_kind = failure_kind
        self.status_code = status_code


class HttpError(NetworkError):
    """Raised when the remote provider answers with a non-2xx status."""


class UnexpectedResponseShape(TranslationError):
    """Raised when a provider payload cannot be interpreted."""


class UnsupportedLanguage(TranslationError, ValueError):
    """Raised synchronously for language-selection or glossary misuse."""


class TranslationCancelled(TranslationError):
    """Raised when a retry loop observes its cancellation signal."""


class CommandError(RuntimeError):
    """Raised when a CLI command fails at a named stage."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped command error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint
