"""TTL-checked artifact cache over a pluggable storage backend."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from holdermap.core.exceptions import CacheError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A cached payload and the freshness window it was stored with."""

    key: str
    payload: Any
    created_at: float
    ttl: float

    def age(self, now: float) -> float:
        return now - self.created_at

    def is_fresh(self, now: float) -> bool:
        """An entry is usable iff now - created_at < ttl."""
        return self.age(now) < self.ttl


class CacheBackend(ABC):
    """Storage for whole cache entries. Writes replace, never merge."""

    @abstractmethod
    async def read(self, key: str) -> CacheEntry | None:
        """Return the stored entry for `key` regardless of age, or None."""
        ...

    @abstractmethod
    async def write(self, entry: CacheEntry) -> None:
        """Store `entry`, replacing any previous entry for the same key."""
        ...

    async def close(self) -> None:
        """Release backend resources."""
        return None


class ArtifactCache:
    """
    Key/value cache with a per-entry freshness window.

    `get` answers "is there a usable value for this key": a missing entry and
    a stale entry both come back as None. There is no locking; concurrent
    `put` calls for one key are last-write-wins.

    Usage:
        cache = ArtifactCache(MemoryBackend(), default_ttl=600)
        await cache.put("ethereum:0xabc", record)
        entry = await cache.get("ethereum:0xabc")
    """

    def __init__(
        self,
        backend: CacheBackend,
        default_ttl: float,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if default_ttl <= 0:
            raise ValueError(f"default_ttl must be positive, got {default_ttl}")
        self._backend = backend
        self.default_ttl = default_ttl
        self._clock = clock

    @property
    def backend(self) -> CacheBackend:
        return self._backend

    def now(self) -> float:
        return self._clock()

    async def get(self, key: str, *, allow_stale: bool = False) -> CacheEntry | None:
        """Return a fresh entry for `key`, or None if missing or stale.

        Args:
            key: Cache key
            allow_stale: Return the entry whatever its age. Only for artifacts
                that have no freshness window of their own.

        Raises:
            CacheError: The backend could not be read.
        """
        try:
            entry = await self._backend.read(key)
        except CacheError:
            raise
        except Exception as e:
            raise CacheError(f"Failed to read cache key {key}: {e}") from e

        if entry is None:
            return None
        if allow_stale or entry.is_fresh(self.now()):
            return entry

        logger.debug(f"Cache entry {key} is stale ({entry.age(self.now()):.0f}s old)")
        return None

    async def put(self, key: str, payload: Any, ttl: float | None = None) -> CacheEntry:
        """Store `payload` under `key` as a brand new entry.

        Raises:
            CacheError: The backend could not be written.
        """
        entry = CacheEntry(
            key=key,
            payload=payload,
            created_at=self.now(),
            ttl=ttl if ttl is not None else self.default_ttl,
        )
        try:
            await self._backend.write(entry)
        except CacheError:
            raise
        except Exception as e:
            raise CacheError(f"Failed to write cache key {key}: {e}") from e
        return entry

    async def close(self) -> None:
        await self._backend.close()
