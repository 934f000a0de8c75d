"""Caching decorators for async methods."""

import logging
from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from pydantic import BaseModel

from holdermap.core.exceptions import CacheError

P = ParamSpec("P")
R = TypeVar("R")

logger = logging.getLogger(__name__)


def cached(
    key_builder: Callable[..., str],
    ttl: float | None = None,
    cache_none: bool = False,
    model: type[BaseModel] | None = None,
):
    """
    Decorator for caching async method results in `self._cache`.

    Args:
        key_builder: Function that takes the same args as decorated method
                    (without self) and returns a cache key string.
        ttl: Time to live in seconds (default: the cache's default ttl).
        cache_none: Whether to cache None results (default False).
        model: Pydantic model to rebuild payloads that come back from a
               serialising backend as plain dicts.

    A cache that fails to read is treated as a miss, and a cache that fails
    to write is skipped; either way the method result is still returned.

    Usage:
        @cached(lambda platform, address: f"{platform}:{address}", ttl=600)
        async def _fetch(self, platform: str, address: str) -> Record | None:
            ...
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        async def wrapper(self, *args: P.args, **kwargs: P.kwargs) -> R:
            # Get cache from self._cache if available
            cache = getattr(self, "_cache", None)
            if cache is None:
                return await func(self, *args, **kwargs)

            key = key_builder(*args, **kwargs)

            try:
                entry = await cache.get(key)
            except CacheError as e:
                logger.warning(f"Cache read failed for {key}: {e}")
                entry = None

            if entry is not None:
                logger.debug(f"Cache hit for {key}")
                payload = entry.payload
                if model is not None and not isinstance(payload, model):
                    payload = model.model_validate(payload)
                return payload

            result = await func(self, *args, **kwargs)

            if result is not None or cache_none:
                try:
                    await cache.put(key, result, ttl=ttl)
                except CacheError as e:
                    logger.warning(f"Cache write failed for {key}: {e}")

            return result

        return wrapper

    return decorator
