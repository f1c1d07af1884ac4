"""Translation cache stores keyed by language pair and normalized source text.

Responsibilities:
- Build stable cache keys from source/target language and normalized text.
- Persist translations in SQLite, or keep them in memory when no store path
  is configured (the automatic choice under test).
- Track basic cache telemetry (hits/misses).

Key types:
- `CacheStore`: async interface consumed by the translation client.
- `MemoryCacheStore`: process-lifetime dictionary backend.
- `SqliteCacheStore`: persistent backend opened by name and schema version.
"""

from __future__ import annotations

import asyncio
from hashlib import sha256
from pathlib import Path
import sqlite3
from typing import Callable, TypeVar

from ..errors import StorageError
from ..parsing import collapse_whitespace

_Result = TypeVar("_Result")


def make_cache_key(source_language: str, target_language: str, text: str) -> str:
    """Build a deterministic cache key with a normalized-text hash suffix."""

    normalized_text = collapse_whitespace(text)
    text_hash = sha256(normalized_text.encode("utf-8")).hexdigest()
    return (
        f"translation:{source_language.strip().lower()}:"
        f"{target_language.strip().lower()}:{text_hash}"
    )


class CacheStore:
    """Async key/value interface for cached translations."""

    hits: int
    misses: int

    async def init(self) -> None:
        """Open or create the backing store; safe to call more than once."""

        raise NotImplementedError

    async def get(self, key: str) -> str | None:
        """Return the cached value for a key, or `None` when absent."""

        raise NotImplementedError

    async def set(self, key: str, value: str) -> None:
        """Store a value under a key."""

        raise NotImplementedError

    async def clear(self) -> None:
        """Remove every cached entry."""

        raise NotImplementedError

    async def close(self) -> None:
        """Release backend resources."""

    def hit_rate(self) -> float:
        """Return cache hit rate for the current store lifecycle."""

        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / float(total)


class MemoryCacheStore(CacheStore):
    """In-memory cache used when no persistent store is configured."""

    def __init__(self) -> None:
        self.entries: dict[str, str] = {}
        self.hits = 0
        self.misses = 0

    async def init(self) -> None:
        return None

    async def get(self, key: str) -> str | None:
        if key in self.entries:
            self.hits += 1
            return self.entries[key]
        self.misses += 1
        return None

    async def set(self, key: str, value: str) -> None:
        self.entries[key] = value

    async def clear(self) -> None:
        self.entries.clear()


class SqliteCacheStore(CacheStore):
    """Persistent SQLite cache with one-time schema creation and upgrade.

    Blocking sqlite calls run in a worker thread through `asyncio.to_thread`,
    so the event loop keeps serving other in-flight translations. Every call
    opens its own short-lived connection.
    """

    def __init__(self, db_path: Path, name: str = "translationCache", version: int = 1) -> None:
        """Initialize store location and schema identity.

        Args:
            db_path: SQLite database file; parent directories are created.
            name: Logical store name, used as the table name suffix.
            version: Schema version recorded per store name in `cache_meta`.
        """

        self.db_path = Path(db_path)
        self.name = name
        self.version = version
        self.hits = 0
        self.misses = 0
        self._initialized = False
        self._init_lock = asyncio.Lock()
        self._table = "entries_" + "".join(
            character if character.isalnum() else "_" for character in name
        )

    async def init(self) -> None:
        """Create the database file and table once; later calls are no-ops."""

        if self._initialized:
            return
        async with self._init_lock:
            if self._initialized:
                return
            await self._run(self._init_db)
            self._initialized = True

    async def get(self, key: str) -> str | None:
        self._require_initialized()
        value = await self._run(self._select, key)
        if value is None:
            self.misses += 1
        else:
            self.hits += 1
        return value

    async def set(self, key: str, value: str) -> None:
        self._require_initialized()
        await self._run(self._upsert, key, value)

    async def clear(self) -> None:
        self._require_initialized()
        await self._run(self._delete_all)

    async def _run(self, action: Callable[..., _Result], *args: object) -> _Result:
        """Run one blocking database action off the event loop."""

        try:
            return await asyncio.to_thread(action, *args)
        except (sqlite3.Error, OSError) as exc:
            raise StorageError(f"Translation cache `{self.name}` operation failed: {exc}") from exc

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise StorageError(f"Translation cache `{self.name}` is not initialized.")

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _init_db(self) -> None:
        """Create or upgrade this store's table to the configured version.

        Versions are tracked per store name, so stores sharing one database
        file never reset each other's tables.
        """

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._connect()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS cache_meta (
                    name TEXT PRIMARY KEY,
                    version INTEGER NOT NULL
                )
                """
            )
            row = conn.execute(
                "SELECT version FROM cache_meta WHERE name = ?",
                (self.name,),
            ).fetchone()
            current_version = row[0] if row else 0
            if current_version < self.version:
                # Cached translations carry no schema of their own; an upgrade
                # starts from an empty table.
                conn.execute(f"DROP TABLE IF EXISTS {self._table}")
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self._table} (
                    cache_key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            conn.execute(
                "INSERT OR REPLACE INTO cache_meta (name, version) VALUES (?, ?)",
                (self.name, self.version),
            )
            conn.commit()
        finally:
            conn.close()

    def _select(self, key: str) -> str | None:
        conn = self._connect()
        try:
            row = conn.execute(
                f"SELECT value FROM {self._table} WHERE cache_key = ?",
                (key,),
            ).fetchone()
            return row[0] if row else None
        finally:
            conn.close()

    def _upsert(self, key: str, value: str) -> None:
        conn = self._connect()
        try:
            conn.execute(
                f"INSERT OR REPLACE INTO {self._table} (cache_key, value) VALUES (?, ?)",
                (key, value),
            )
            conn.commit()
        finally:
            conn.close()

    def _delete_all(self) -> None:
        conn = self._connect()
        try:
            conn.execute(f"DELETE FROM {self._table}")
            conn.commit()
        finally:
            conn.close()


def create_cache_store(
    cache_path: Path | None,
    name: str = "translationCache",
    version: int = 1,
) -> CacheStore:
    """Select the persistent store when a path is configured, memory otherwise."""

    if cache_path is None:
        return MemoryCacheStore()
    return SqliteCacheStore(cache_path, name=name, version=version)
