"""Async Redis connection used by the shared market-data cache."""

from __future__ import annotations

import logging
from typing import Any

import redis.asyncio as aioredis
from pydantic_core import from_json, to_json
from redis.exceptions import RedisError

from holdermap.core.exceptions import CacheError

logger = logging.getLogger(__name__)


class AsyncRedisClient:
    """
    Thin async Redis connection storing JSON documents with an expiry.

    Values go through pydantic's JSON encoder, so Decimal prices and
    datetimes survive without custom hooks. Redis failures surface as
    CacheError, which the cache layer treats as a miss or a skipped write.
    """

    def __init__(
        self,
        redis_url: str,
        *,
        max_connections: int = 20,
        socket_timeout: float = 2.0,
    ) -> None:
        self._redis_url = redis_url
        self._max_connections = max_connections
        self._socket_timeout = socket_timeout
        self._pool: aioredis.ConnectionPool | None = None
        self._redis: aioredis.Redis | None = None

    @property
    def is_connected(self) -> bool:
        return self._redis is not None

    async def connect(self) -> None:
        """Open the pool and check the server answers.

        Raises:
            CacheError: The server is unreachable.
        """
        self._pool = aioredis.ConnectionPool.from_url(
            self._redis_url,
            max_connections=self._max_connections,
            socket_timeout=self._socket_timeout,
            socket_connect_timeout=self._socket_timeout,
        )
        self._redis = aioredis.Redis(connection_pool=self._pool)
        try:
            await self._redis.ping()
        except RedisError as e:
            await self.close()
            raise CacheError(f"Redis unreachable at {self._redis_url}: {e}") from e
        logger.info("Connected to Redis")

    async def close(self) -> None:
        """Close the connection pool."""
        if self._redis:
            await self._redis.aclose()
        if self._pool:
            await self._pool.disconnect()
        self._redis = None
        self._pool = None

    async def ping(self) -> bool:
        """Whether the server answers; raises when it does not."""
        if not self._redis:
            return False
        return bool(await self._redis.ping())

    async def get(self, key: str) -> Any | None:
        """Decoded JSON document at `key`; None when absent or not JSON."""
        if not self._redis:
            return None
        try:
            raw = await self._redis.get(key)
        except RedisError as e:
            raise CacheError(f"Redis GET {key} failed: {e}") from e
        if raw is None:
            return None
        try:
            return from_json(raw)
        except ValueError:
            logger.warning(f"Ignoring non-JSON value at {key}")
            return None

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """Store `value` as JSON, expiring after `ttl` seconds."""
        if not self._redis:
            return
        try:
            await self._redis.set(key, to_json(value), ex=ttl)
        except RedisError as e:
            raise CacheError(f"Redis SET {key} failed: {e}") from e

    async def __aenter__(self) -> AsyncRedisClient:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
