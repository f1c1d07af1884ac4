"""Translation service components.

This package defines the translation client and the collaborators it owns:
cache stores, token-bucket rate limiting, retry policy, request dispatch and
the remote provider adapter.
"""

from .cache import CacheStore, MemoryCacheStore, SqliteCacheStore, create_cache_store, make_cache_key
from .client import TranslationClient
from .dispatcher import AsyncDispatcher, InlineTransport, WorkerTransport
from .provider import HttpTranslationProvider, TranslationProvider
from .rate_limiter import TokenBucketRateLimiter
from .retry import RetryExecutor, run_with_backoff

__all__ = [
    "AsyncDispatcher",
    "CacheStore",
    "HttpTranslationProvider",
    "InlineTransport",
    "MemoryCacheStore",
    "RetryExecutor",
    "SqliteCacheStore",
    "TokenBucketRateLimiter",
    "TranslationClient",
    "TranslationProvider",
    "WorkerTransport",
    "create_cache_store",
    "make_cache_key",
    "run_with_backoff",
]
