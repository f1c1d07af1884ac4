"""Translation client orchestrating cache, masking, rate limiting and retries.

Responsibilities:
- Serve repeated phrases from the cache without touching the network.
- Mask markup and special characters around provider calls.
- Admit remote calls through the token bucket and retry transient failures.
- Correlate in-flight remote calls through the async dispatcher.

Per-call flow for `translate`:
``cache check -> (hit: return) | (miss: rate-limit wait -> protect ->
dispatch with retry -> restore -> optional glossary -> cache store -> return)``.
"""

from __future__ import annotations

import asyncio
from typing import Any, Sequence

from ..config import TranslationConfig
from ..errors import UnexpectedResponseShape, UnsupportedLanguage
from ..models.datatypes import DispatchRequest, TranslateOptions
from ..parsing import collapse_whitespace, normalize_language_tag
from ..telemetry.logger import TranslationEventLogger
from ..telemetry.stats import TranslationStats
from ..text.glossary import Glossary
from ..text.protector import TextProtector
from .cache import CacheStore, create_cache_store, make_cache_key
from .dispatcher import AsyncDispatcher, InlineTransport, WorkerTransport
from .provider import HttpTranslationProvider, TranslationProvider
from .rate_limiter import TokenBucketRateLimiter
from .retry import RetryExecutor


class TranslationClient:
    """Sole entry point for translating utterances.

    All collaborators are owned by one client instance; none is shared across
    clients. Failures from retries, the cache or the strict rate limiter reach
    the caller unchanged.
    """

    def __init__(
        self,
        config: TranslationConfig | None = None,
        *,
        provider: TranslationProvider | None = None,
        cache_store: CacheStore | None = None,
        rate_limiter: TokenBucketRateLimiter | None = None,
        retry_executor: RetryExecutor | None = None,
        dispatcher: AsyncDispatcher | None = None,
        glossary: Glossary | None = None,
        event_logger: TranslationEventLogger | None = None,
    ) -> None:
        """Initialize collaborators from config, honoring injected overrides."""

        self.config = config if config is not None else TranslationConfig()
        self.config.validate()
        self.event_logger = event_logger if event_logger is not None else TranslationEventLogger()
        self.provider = (
            provider
            if provider is not None
            else HttpTranslationProvider(
                api_key=self.config.api_key,
                base_url=self.config.base_url,
                project_id=self.config.project_id,
                timeout_seconds=self.config.timeout_seconds,
            )
        )
        self.cache = (
            cache_store
            if cache_store is not None
            else create_cache_store(
                self.config.cache_path,
                name=self.config.cache_name,
                version=self.config.cache_version,
            )
        )
        self.rate_limiter = (
            rate_limiter
            if rate_limiter is not None
            else TokenBucketRateLimiter(
                capacity=self.config.rate_limit_capacity,
                refill_interval_seconds=self.config.rate_limit_interval_seconds,
                mode=self.config.rate_limit_mode,
                event_logger=self.event_logger,
            )
        )
        self.retry = (
            retry_executor
            if retry_executor is not None
            else RetryExecutor(
                max_attempts=self.config.max_attempts,
                base_delay_seconds=self.config.backoff_base_seconds,
                event_logger=self.event_logger,
            )
        )
        self.dispatcher = dispatcher if dispatcher is not None else self._create_dispatcher()
        self.glossary = glossary if glossary is not None else Glossary(self.config.glossary)
        self.protector = TextProtector()
        self.stats = TranslationStats()
        self.source_language = self.config.source_language
        self.target_language = self.config.target_language
        self._initialized = False
        self._init_lock = asyncio.Lock()

    def _create_dispatcher(self) -> AsyncDispatcher:
        """Build the dispatcher for the configured execution context."""

        if self.config.dispatch_mode == "inline":
            return AsyncDispatcher(InlineTransport(self._execute_request))
        return AsyncDispatcher(
            WorkerTransport(self._execute_request, max_workers=self.config.worker_threads)
        )

    async def init(self) -> None:
        """Open the cache store once; later calls are no-ops."""

        if self._initialized:
            return
        async with self._init_lock:
            if self._initialized:
                return
            await self.cache.init()
            self._initialized = True

    async def close(self) -> None:
        """Release the dispatcher transport and cache resources."""

        self.dispatcher.close()
        await self.cache.close()

    async def __aenter__(self) -> TranslationClient:
        await self.init()
        return self

    async def __aexit__(self, *_exc_info: object) -> None:
        await self.close()

    def set_source_language(self, language: str) -> None:
        """Select the source language tag (`auto` allowed)."""

        self.source_language = normalize_language_tag(language, allow_auto=True)

    def set_target_language(self, language: str) -> None:
        """Select the target language tag (`auto` rejected)."""

        self.target_language = normalize_language_tag(language, allow_auto=False)

    async def clear_cache(self) -> None:
        """Drop every cached translation, e.g. after a configuration change."""

        await self.init()
        await self.cache.clear()
        self.event_logger.cache_cleared()

    def add_glossary_term(self, term: str, translation: str) -> None:
        self.glossary.add_term(term, translation)

    def remove_glossary_term(self, term: str) -> bool:
        return self.glossary.remove_term(term)

    def apply_glossary(self, text: str) -> str:
        """Apply glossary substitution to already translated text."""

        return self.glossary.apply(text)

    async def translate(self, text: str, options: TranslateOptions | None = None) -> str:
        """Translate one utterance using the current language pair.

        Raises:
            NetworkError: When every retry attempt failed.
            RateLimitExceeded: In `strict` rate-limit mode with an empty bucket.
            StorageError: When the cache backend fails.
            UnexpectedResponseShape: When the provider payload is malformed.
        """

        resolved = options if options is not None else TranslateOptions()
        await self.init()
        if not collapse_whitespace(text):
            return ""

        source_language = self.source_language
        target_language = self.target_language
        cache_key = make_cache_key(source_language, target_language, text)
        cached = await self.cache.get(cache_key)
        if cached is not None:
            self.stats.cache_hits += 1
            self.event_logger.cache_hit(cache_key)
            return cached
        self.stats.cache_misses += 1
        self.event_logger.cache_miss(cache_key)

        await self._acquire_token()
        protected = self.protector.protect(text)
        request_source = source_language
        if resolved.detect_source:
            request_source = await self._detect(text, resolved.cancel_event)

        translations = await self._dispatch_with_retry(
            DispatchRequest(
                operation="translate",
                texts=(protected.masked_text,),
                source_language=request_source,
                target_language=target_language,
                mime_type=resolved.mime_type or self.config.mime_type,
            ),
            resolved.cancel_event,
        )
        if len(translations) != 1:
            raise UnexpectedResponseShape(
                f"Provider returned {len(translations)} translations for one input."
            )
        translated = self.protector.restore(translations[0], protected)
        if resolved.apply_glossary:
            translated = self.glossary.apply(translated)
        await self.cache.set(cache_key, translated)
        return translated

    async def batch_translate(
        self,
        texts: Sequence[str],
        options: TranslateOptions | None = None,
    ) -> list[str]:
        """Translate many texts with one remote call per batch of at most 100.

        Each batch result is truncated or padded to its batch length, so the
        output always has exactly `len(texts)` entries in input order. Padding
        reuses the untranslated source text and is logged and counted.
        """

        resolved = options if options is not None else TranslateOptions()
        await self.init()
        items = list(texts)
        results: list[str] = []
        batch_size = self.config.batch_size
        for start in range(0, len(items), batch_size):
            batch = items[start : start + batch_size]
            await self._acquire_token()
            translated = await self._dispatch_with_retry(
                DispatchRequest(
                    operation="translate",
                    texts=tuple(batch),
                    source_language=self.source_language,
                    target_language=self.target_language,
                    mime_type=resolved.mime_type or self.config.mime_type,
                ),
                resolved.cancel_event,
            )
            aligned = self._align_batch(batch, translated)
            if resolved.apply_glossary:
                aligned = [self.glossary.apply(item) for item in aligned]
            results.extend(aligned)
        return results

    async def detect_language(self, text: str, options: TranslateOptions | None = None) -> str:
        """Return the most probable language tag for `text` (one remote call)."""

        resolved = options if options is not None else TranslateOptions()
        await self._acquire_token()
        return await self._detect(text, resolved.cancel_event)

    async def translate_json(self, value: Any, options: TranslateOptions | None = None) -> Any:
        """Translate every string leaf of a JSON-like value.

        Mapping keys are kept; list elements are translated concurrently;
        numbers, booleans and `None` pass through unchanged.
        """

        if isinstance(value, str):
            return await self.translate(value, options)
        if isinstance(value, list | tuple):
            return list(
                await asyncio.gather(*(self.translate_json(item, options) for item in value))
            )
        if isinstance(value, dict):
            translated: dict[Any, Any] = {}
            for key, item in value.items():
                translated[key] = await self.translate_json(item, options)
            return translated
        return value

    async def _acquire_token(self) -> None:
        """Pass rate-limit admission and mirror wait telemetry into stats."""

        await self.rate_limiter.acquire()
        self.stats.rate_limit_waits = self.rate_limiter.wait_count

    async def _detect(self, text: str, cancel_event: asyncio.Event | None) -> str:
        """Run one detection request under the shared retry policy."""

        result = await self._dispatch_with_retry(
            DispatchRequest(operation="detect", texts=(text,)),
            cancel_event,
        )
        try:
            return normalize_language_tag(result, allow_auto=False)
        except UnsupportedLanguage as exc:
            raise UnexpectedResponseShape(
                f"Provider returned an invalid language tag: {result!r}."
            ) from exc

    async def _dispatch_with_retry(
        self,
        request: DispatchRequest,
        cancel_event: asyncio.Event | None,
    ) -> Any:
        """Submit a request through the dispatcher, retrying transient failures."""

        async def _attempt() -> Any:
            self.stats.remote_calls += 1
            self.event_logger.remote_call(request.operation, len(request.texts))
            return await self.dispatcher.submit(request)

        try:
            return await self.retry.run_with_backoff(
                _attempt,
                operation_name=request.operation,
                cancel_event=cancel_event,
            )
        except Exception as exc:
            self.event_logger.failure("provider", type(exc).__name__)
            raise
        finally:
            self.stats.retry_attempts = self.retry.retry_attempt_count

    def _execute_request(self, request: DispatchRequest) -> Any:
        """Run one request against the provider inside the dispatch context."""

        if request.operation == "detect":
            return self.provider.detect_language(request.texts[0])
        if request.operation == "translate":
            return self.provider.translate_texts(
                list(request.texts),
                source_language=request.source_language,
                target_language=request.target_language,
                mime_type=request.mime_type,
            )
        raise ValueError(f"Unsupported dispatch operation `{request.operation}`.")

    def _align_batch(self, batch: list[str], translated: list[str]) -> list[str]:
        """Truncate or pad provider output to exactly the batch length."""

        if len(translated) == len(batch):
            return list(translated)
        self.event_logger.batch_misaligned(expected=len(batch), received=len(translated))
        if len(translated) > len(batch):
            return list(translated[: len(batch)])
        missing = len(batch) - len(translated)
        self.stats.padded_results += missing
        return list(translated) + batch[len(translated) :]
