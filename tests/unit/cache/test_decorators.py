"""Tests for the caching decorator."""

from __future__ import annotations

from decimal import Decimal

from holdermap.cache.backends import MemoryBackend
from holdermap.cache.base import ArtifactCache, CacheEntry
from holdermap.cache.decorators import cached
from holdermap.core.models import MarketDataRecord


class BrokenBackend(MemoryBackend):
    async def read(self, key: str) -> CacheEntry | None:
        raise ConnectionError("down")

    async def write(self, entry: CacheEntry) -> None:
        raise ConnectionError("down")


class Lookup:
    """Counts calls to a cached method."""

    def __init__(self, cache: ArtifactCache | None, result=None) -> None:
        self._cache = cache
        self.result = result
        self.calls = 0

    @cached(lambda name: f"lookup:{name}", ttl=30)
    async def fetch(self, name: str):
        self.calls += 1
        return self.result

    @cached(lambda name: f"negative:{name}", cache_none=True)
    async def fetch_negative(self, name: str):
        self.calls += 1
        return None

    @cached(lambda name: f"record:{name}", model=MarketDataRecord)
    async def fetch_record(self, name: str):
        self.calls += 1
        return self.result


class TestCachedDecorator:
    """Tests for @cached."""

    async def test_second_call_hits_cache(self, clock):
        lookup = Lookup(ArtifactCache(MemoryBackend(), 600, clock=clock), result="value")

        assert await lookup.fetch("a") == "value"
        assert await lookup.fetch("a") == "value"
        assert lookup.calls == 1

    async def test_explicit_ttl(self, clock):
        lookup = Lookup(ArtifactCache(MemoryBackend(), 600, clock=clock), result="value")

        await lookup.fetch("a")
        clock.advance(31)
        await lookup.fetch("a")

        assert lookup.calls == 2

    async def test_none_not_cached_by_default(self, clock):
        lookup = Lookup(ArtifactCache(MemoryBackend(), 600, clock=clock), result=None)

        await lookup.fetch("a")
        await lookup.fetch("a")

        assert lookup.calls == 2

    async def test_cache_none_opt_in(self, clock):
        backend = MemoryBackend()
        lookup = Lookup(ArtifactCache(backend, 600, clock=clock))

        await lookup.fetch_negative("a")

        assert "negative:a" in backend

    async def test_without_cache_calls_through(self):
        lookup = Lookup(None, result="value")

        await lookup.fetch("a")
        await lookup.fetch("a")

        assert lookup.calls == 2

    async def test_broken_cache_degrades_to_call(self, clock):
        """Read and write failures are logged; the result is still returned."""
        lookup = Lookup(ArtifactCache(BrokenBackend(), 600, clock=clock), result="value")

        assert await lookup.fetch("a") == "value"
        assert lookup.calls == 1

    async def test_model_rebuilt_from_plain_payload(self, clock):
        """Dict payloads from serialising backends come back as models."""
        cache = ArtifactCache(MemoryBackend(), 600, clock=clock)
        await cache.put("record:a", {"price": "2.5", "market_cap": "100"})
        lookup = Lookup(cache)

        record = await lookup.fetch_record("a")

        assert isinstance(record, MarketDataRecord)
        assert record.price == Decimal("2.5")
        assert lookup.calls == 0
