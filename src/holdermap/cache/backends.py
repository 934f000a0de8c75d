"""Storage backends for ArtifactCache."""

from __future__ import annotations

import asyncio
import logging
import math
import os
import re
import uuid
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from holdermap.cache.base import CacheBackend, CacheEntry

if TYPE_CHECKING:
    from holdermap.cache.client import AsyncRedisClient

logger = logging.getLogger(__name__)


class MemoryBackend(CacheBackend):
    """Process-local dict of entries, for small structured records."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}

    async def read(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    async def write(self, entry: CacheEntry) -> None:
        self._entries[entry.key] = entry

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries


class FileSystemBackend(CacheBackend):
    """
    One file per key in a single flat directory, for binary artifacts.

    The file's mtime is the entry's creation time. Per-entry ttl is not
    persisted: entries are read back under the backend's `ttl`.
    Writes go through a temporary file and `os.replace`, so readers see
    either the old bytes or the new bytes, never a partial file.
    """

    KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")

    def __init__(self, directory: Path | str, ttl: float, suffix: str = ".png") -> None:
        self.directory = Path(directory)
        self.ttl = ttl
        self.suffix = suffix
        if not self.directory.exists():
            self.directory.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created cache directory: {self.directory}")

    def path_for(self, key: str) -> Path:
        """Deterministic file path for a cache key."""
        if not self.KEY_PATTERN.match(key):
            raise ValueError(f"Cache key is not a safe filename: {key!r}")
        return self.directory / f"{key}{self.suffix}"

    async def read(self, key: str) -> CacheEntry | None:
        path = self.path_for(key)
        return await asyncio.to_thread(self._read_sync, key, path)

    async def write(self, entry: CacheEntry) -> None:
        if not isinstance(entry.payload, (bytes, bytearray)):
            raise TypeError(
                f"FileSystemBackend stores bytes, got {type(entry.payload).__name__}"
            )
        path = self.path_for(entry.key)
        await asyncio.to_thread(self._write_sync, path, bytes(entry.payload), entry.created_at)

    def _read_sync(self, key: str, path: Path) -> CacheEntry | None:
        try:
            stat = path.stat()
            payload = path.read_bytes()
        except FileNotFoundError:
            return None
        return CacheEntry(key=key, payload=payload, created_at=stat.st_mtime, ttl=self.ttl)

    def _write_sync(self, path: Path, payload: bytes, created_at: float) -> None:
        tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            tmp_path.write_bytes(payload)
            os.utime(tmp_path, (created_at, created_at))
            os.replace(tmp_path, path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()


class RedisBackend(CacheBackend):
    """Shared JSON-serialisable entries in Redis, for multi-process deployments."""

    def __init__(self, client: AsyncRedisClient, prefix: str = "holdermap:") -> None:
        self._client = client
        self._prefix = prefix

    def _redis_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def read(self, key: str) -> CacheEntry | None:
        data = await self._client.get(self._redis_key(key))
        if not isinstance(data, dict) or "payload" not in data:
            return None
        return CacheEntry(
            key=key,
            payload=data["payload"],
            created_at=float(data.get("created_at", 0.0)),
            ttl=float(data.get("ttl", 0.0)),
        )

    async def write(self, entry: CacheEntry) -> None:
        await self._client.set(
            self._redis_key(entry.key),
            {
                "payload": self._serialize(entry.payload),
                "created_at": entry.created_at,
                "ttl": entry.ttl,
            },
            ttl=max(1, math.ceil(entry.ttl)),
        )

    @staticmethod
    def _serialize(payload: Any) -> Any:
        if isinstance(payload, BaseModel):
            return payload.model_dump(mode="json")
        return payload
