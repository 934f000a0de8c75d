"""Artifact caching with filesystem, memory and Redis backends."""

from .backends import FileSystemBackend, MemoryBackend, RedisBackend
from .base import ArtifactCache, CacheBackend, CacheEntry
from .client import AsyncRedisClient
from .decorators import cached
from .keys import CacheKeys

__all__ = [
    "ArtifactCache",
    "AsyncRedisClient",
    "CacheBackend",
    "CacheEntry",
    "CacheKeys",
    "FileSystemBackend",
    "MemoryBackend",
    "RedisBackend",
    "cached",
]
